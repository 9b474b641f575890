"""
Application principale FastAPI.

Assemble middlewares, gestionnaires d'erreurs, routes et métriques de l'API d'onboarding de
marque.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application autour d'un `Container` (fourni par les tests ou créé ici)
- Attendre les persistances de fond en cours à l'arrêt
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from backend.api.routes_assets import router as assets_router
from backend.api.routes_brand import router as brand_router
from backend.api.routes_health import router as health_router
from backend.api.routes_onboarding import router as onboarding_router
from backend.apigw.errors import (
    handle_brand_error,
    handle_generic_exception,
    handle_http_exception,
    handle_request_validation,
)
from backend.app.metrics import PrometheusMiddleware, metrics_router
from backend.core.container import Container
from backend.core.logging import setup_logging
from backend.domain.errors import BrandError
from backend.middlewares.request_id import RequestIDMiddleware
from backend.middlewares.timing import TimingMiddleware

log = structlog.get_logger(__name__)


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Ajoute les middlewares de traçabilité et de mesure
    - Enregistre les gestionnaires d'erreurs (enveloppe JSON commune)
    - Publie les routes d'onboarding, de marque, d'assets, de santé et de métriques
    """
    container = container or Container()
    settings = container.settings
    setup_logging(settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        drained = await container.background.drain(settings.BACKGROUND_DRAIN_TIMEOUT_S)
        log.info("shutdown", background_drained=drained)

    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG, lifespan=lifespan)
    app.state.container = container

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(o) for o in settings.CORS_ORIGINS],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(TimingMiddleware)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(BrandError, handle_brand_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_generic_exception)

    app.include_router(health_router)
    app.include_router(onboarding_router)
    app.include_router(brand_router)
    app.include_router(assets_router)
    app.include_router(metrics_router)
    return app


app = create_app()
