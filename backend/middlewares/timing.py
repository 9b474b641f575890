"""Middleware de mesure du temps de traitement des requêtes.

Ajoute l'en-tête `X-Process-Time-ms` et journalise une ligne `request_completed` par requête
(sauf sondes `/health` et `/metrics`). Pour une réponse en flux, la durée couvre la préparation
du tour jusqu'à l'envoi des en-têtes, pas la génération complète.
"""

import time
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

log = structlog.get_logger(__name__)

_UNLOGGED_PATHS = frozenset({"/health", "/metrics"})


class TimingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, header_name: str = "X-Process-Time-ms") -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request, call_next: Callable):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers[self.header_name] = f"{elapsed_ms:.2f}"
        if request.url.path not in _UNLOGGED_PATHS:
            log.info(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                elapsed_ms=elapsed_ms,
                streamed=response.headers.get("content-type", "").startswith(
                    "text/event-stream"
                ),
            )
        return response
