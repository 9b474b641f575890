"""Middleware Starlette d'identifiant de requête.

Reprend l'en-tête `X-Request-ID` fourni par le client (ou un proxy) s'il est raisonnable, sinon en
génère un. L'identifiant est posé sur `request.state`, lié au contexte structlog le temps de la
requête et renvoyé dans la réponse; l'enveloppe d'erreur le reprend comme `trace_id`.
"""

import re
from collections.abc import Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

# Identifiants acceptés tels quels; le reste est remplacé pour ne pas polluer les logs.
_SAFE_ID = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _SAFE_ID.match(incoming):
        return incoming
    return uuid4().hex


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propage un identifiant de requête dans l'état, les logs et la réponse."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next: Callable):
        request_id = resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response
