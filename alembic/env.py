"""
Environnement Alembic des tables d'onboarding de marque.

L'URL vient des settings applicatifs (env/.env) pour que migrations et application visent la même
base; `alembic.ini` ajoute la racine du dépôt au `sys.path` (`prepend_sys_path = .`). Sur SQLite,
les migrations passent en mode batch pour permettre les ALTER de colonnes.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context  # type: ignore[attr-defined]
from backend.core.settings import get_settings
from backend.infra.repo.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

DEFAULT_DATABASE_URL = "sqlite:///./brand_onboarding.db"


def _database_url() -> str:
    return get_settings().DATABASE_URL or DEFAULT_DATABASE_URL


def _configure_kwargs(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    """Émet le SQL sans connexion (`alembic upgrade --sql`)."""
    url = _database_url()
    context.configure(url=url, literal_binds=True, **_configure_kwargs(url))
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    connectable = create_engine(url, poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
