"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et les métriques métier de l'assistant d'onboarding
(tours, avancées d'étape, extraction, jetons et coût LLM, persistance différée).
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Onboarding
ONBOARDING_TURNS = Counter(
    "onboarding_turns_total",
    "Total onboarding chat turns by outcome",
    ["step", "outcome"],
)
ONBOARDING_STEP_ADVANCES = Counter(
    "onboarding_step_advances_total",
    "Step advances triggered by the completion marker",
    ["from_step", "to_step"],
)
EXTRACTION_FAILURES = Counter(
    "onboarding_extraction_failures_total",
    "Extraction calls that failed on the network",
    ["step"],
)
BACKGROUND_TASK_FAILURES = Counter(
    "background_task_failures_total",
    "Background tasks that raised",
    ["name"],
)
FIELD_VERSIONS_WRITTEN = Counter(
    "brand_field_versions_total",
    "Field versions appended to the ledger",
    ["source"],
)

# LLM
LLM_TOKENS_TOTAL = Counter(
    "llm_tokens_total",
    "Accumulated LLM tokens",
    ["model", "kind"],
)
LLM_COST_USD = Counter(
    "llm_cost_usd_total",
    "Accumulated LLM cost in USD",
    ["model"],
)


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route pour l'exposition
    Prometheus.
    """

    async def dispatch(self, request: Request, call_next):
        """Traite une requête HTTP et collecte les métriques."""
        start = time.perf_counter()
        response: Response = await call_next(request)
        route = request.scope.get("route")
        label = getattr(route, "path", None) or "unmatched"
        REQUEST_COUNT.labels(request.method, label, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(label).observe(time.perf_counter() - start)
        return response
