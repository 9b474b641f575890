"""Configuration de test pour pytest avec gestion des chemins.

Ce module ajoute la racine du projet au sys.path et fournit les fixtures communes: base sqlite en
mémoire, settings isolés de l'environnement, conteneur avec LLM scripté, application et client.
"""

import os
import sys

import pytest

# Ensure project root is on sys.path so that
# imports like `from backend...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from backend.core.container import Container  # noqa: E402
from backend.core.settings import Settings  # noqa: E402
from backend.domain.auth import create_access_token  # noqa: E402
from backend.infra.repo.db import get_engine, get_session_factory, session_scope  # noqa: E402
from backend.infra.repo.models import Base  # noqa: E402
from backend.infra.repo.profile_repo import ProfileRepo  # noqa: E402
from tests.fakes import ScriptedLLM  # noqa: E402

MEMORY_URL = "sqlite+pysqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    """Settings de test, sans lecture du fichier .env."""
    return Settings(
        _env_file=None,
        DATABASE_URL=MEMORY_URL,
        LOG_LEVEL="WARNING",
        OPENAI_API_KEY=None,
        JWT_SECRET="test-secret",
    )


@pytest.fixture
def engine():
    eng = get_engine(MEMORY_URL)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def make_profile(session_factory):
    """Crée un profil et retourne son identifiant."""

    def _make(user_id: str = "user-1", step: str = "welcome") -> str:
        with session_scope(session_factory) as session:
            return ProfileRepo(session).create(user_id, first_step=step).id

    return _make


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def container(settings, engine, llm) -> Container:
    return Container(settings, engine=engine, llm=llm)


@pytest.fixture
def token(settings):
    """Fabrique un jeton Bearer pour un utilisateur."""

    def _token(user_id: str = "user-1") -> str:
        return create_access_token(
            settings.JWT_SECRET, settings.JWT_ALG, 5, {"sub": user_id}
        )

    return _token


@pytest.fixture
def auth_headers(token):
    def _headers(user_id: str = "user-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {token(user_id)}"}

    return _headers


@pytest.fixture
def app(container):
    from backend.app.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client
