"""Définition et chargement des paramètres de configuration applicative.

Objectif du module
------------------
- Centraliser les paramètres (env/.env) via Pydantic Settings
- Résoudre le fichier `.env` à utiliser selon la stratégie: ENV_FILE > .env.{APP_ENV} > .env
"""

import os
from pathlib import Path

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

# Détermination du fichier .env à utiliser avec priorité:
# 1) ENV_FILE (chemin explicite)
# 2) .env.{APP_ENV} si présent
# 3) .env (défaut)
_cwd = Path.cwd()
_env_file_from_env = os.getenv("ENV_FILE")
if _env_file_from_env:
    _ENV_FILE_PATH = _env_file_from_env
else:
    _app_env = os.getenv("APP_ENV", "dev")
    _candidate_specific = _cwd / f".env.{_app_env}"
    _candidate_default = _cwd / ".env"
    if _candidate_specific.exists():
        _ENV_FILE_PATH = _candidate_specific
    else:
        _ENV_FILE_PATH = _candidate_default


class Settings(BaseSettings):
    """Modèle de configuration chargé depuis l'environnement et .env."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE_PATH,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
    )
    APP_NAME: str = "brand-onboarding-backend"
    APP_ENV: str = "dev"
    APP_DEBUG: bool = True
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "DEBUG"
    LOG_JSON: bool = False

    CORS_ORIGINS: list[AnyHttpUrl] | list[str] = []
    DATABASE_URL: str | None = None
    # Crée les tables au démarrage (dev/tests); en prod on passe par Alembic
    DB_AUTO_CREATE: bool = True

    # JWT/Auth (l'émission des jetons est externe, on ne fait que les décoder)
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALG: str = "HS256"
    JWT_EXPIRES_MIN: int = 60

    # Génération de texte
    OPENAI_API_KEY: str | None = None
    ONBOARDING_CHAT_MODEL: str = "gpt-4o"
    ONBOARDING_CHAT_TEMPERATURE: float = 0.8
    ONBOARDING_CHAT_MAX_TOKENS: int = 1500
    WELCOME_MAX_TOKENS: int = 800

    # Extraction structurée (second appel, basse température)
    EXTRACTION_MODEL: str = "gpt-4o-mini"
    EXTRACTION_TEMPERATURE: float = 0.1
    EXTRACTION_MAX_TOKENS: int = 512
    EXTRACTION_HISTORY_TURNS: int = 6

    # Registre de versions
    VERSION_ALLOC_MAX_RETRIES: int = 3

    # Persistance différée après la fin du flux
    BACKGROUND_DRAIN_TIMEOUT_S: float = 10.0


def get_settings() -> Settings:
    """Construit et retourne la configuration de l'application."""
    return Settings()
