"""
Endpoint de santé de l'API d'onboarding.

`/health` sonde la base (`SELECT 1`) et indique si le fournisseur de modèle est configuré ainsi
que le nombre de persistances de fin de tour encore en attente. Une base injoignable donne un
statut `degraded` (toujours en 200, la sonde de vivacité reste simple).
"""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend.api.deps import get_container
from backend.core.container import Container

log = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


def _database_ok(container: Container) -> bool:
    try:
        with container.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        log.warning("health_database_unreachable", error=str(exc))
        return False


@router.get("/health")
def health(container: Container = Depends(get_container)):
    db_ok = _database_ok(container)
    return {
        "status": "ok" if db_ok else "degraded",
        "storage": container.storage_backend,
        "database": "ok" if db_ok else "unreachable",
        "llm_enabled": container.llm.enabled,
        "pending_tasks": len(container.background),
    }
