"""
Tests pour la résolution des variables d'environnement.

Vérifie que les settings lisent un fichier .env désigné par `ENV_FILE` et que l'environnement
du processus reste prioritaire.
"""

from __future__ import annotations

import importlib
from pathlib import Path


def _reload_settings():
    settings_mod = importlib.import_module("backend.core.settings")
    return importlib.reload(settings_mod)


def test_settings_reads_env_file(tmp_path: Path, monkeypatch) -> None:
    env = tmp_path / ".env.custom"
    env.write_text(
        "EXTRACTION_HISTORY_TURNS=3\nONBOARDING_CHAT_MODEL=gpt-4o-mini\n", encoding="utf-8"
    )
    monkeypatch.setenv("ENV_FILE", str(env))
    monkeypatch.delenv("EXTRACTION_HISTORY_TURNS", raising=False)
    monkeypatch.delenv("ONBOARDING_CHAT_MODEL", raising=False)

    try:
        s = _reload_settings().get_settings()
        assert s.EXTRACTION_HISTORY_TURNS == 3
        assert s.ONBOARDING_CHAT_MODEL == "gpt-4o-mini"
        assert s.VERSION_ALLOC_MAX_RETRIES == 3
    finally:
        monkeypatch.delenv("ENV_FILE")
        _reload_settings()


def test_process_env_wins_over_file(tmp_path: Path, monkeypatch) -> None:
    env = tmp_path / ".env.custom"
    env.write_text("VERSION_ALLOC_MAX_RETRIES=7\n", encoding="utf-8")
    monkeypatch.setenv("ENV_FILE", str(env))
    monkeypatch.setenv("VERSION_ALLOC_MAX_RETRIES", "5")

    try:
        assert _reload_settings().get_settings().VERSION_ALLOC_MAX_RETRIES == 5
    finally:
        monkeypatch.delenv("ENV_FILE")
        _reload_settings()
