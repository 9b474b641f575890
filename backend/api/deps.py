"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Exposer le conteneur de l'application (`app.state.container`) aux endpoints.
- Authentifier l'appelant à partir du jeton Bearer (claim `sub` = identifiant utilisateur).
- Fournir une session SQLAlchemy par requête, committée en fin de requête.
"""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from backend.core.container import Container
from backend.core.http_constants import HTTP_UNAUTHORIZED
from backend.domain.auth import bearer_token, decode_token
from backend.infra.repo.db import session_scope


def get_container(request: Request) -> Container:
    """Conteneur attaché à l'application."""
    return request.app.state.container


def get_current_user_id(
    authorization: str | None = Header(None),
    container: Container = Depends(get_container),
) -> str:
    """Extrait et valide l'utilisateur courant à partir du token d'autorisation."""
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="missing_token")
    data = decode_token(token, container.settings.JWT_SECRET, container.settings.JWT_ALG)
    if not data:
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="invalid_token")
    return data.sub


def get_session(container: Container = Depends(get_container)) -> Iterator[Session]:
    """Session de requête: commit si le handler réussit, rollback sinon."""
    with session_scope(container.session_factory) as session:
        yield session
