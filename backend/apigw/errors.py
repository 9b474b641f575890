"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Ce module fournit une gestion centralisée des erreurs avec des enveloppes standardisées, des codes
d'erreur cohérents et un support pour le tracing des requêtes. Les exceptions métier
(`BrandError`) portent leur propre code et statut HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from backend.domain.errors import BrandError

log = structlog.get_logger(__name__)

# Map common HTTP status codes to error codes
_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
}


@dataclass
class ErrorEnvelope:
    """Standard error envelope for API responses."""

    code: str
    message: str
    trace_id: str | None = None
    details: dict[str, Any] | None = None


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    envelope = ErrorEnvelope(code=code, message=message, trace_id=trace_id, details=details)
    return JSONResponse(
        status_code=status_code,
        content={
            "code": envelope.code,
            "message": envelope.message,
            "trace_id": envelope.trace_id,
            **({"details": envelope.details} if envelope.details else {}),
        },
        headers=headers,
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state (set by middleware)."""
    trace_id = request.headers.get("X-Trace-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def handle_brand_error(request: Request, exc: BrandError) -> JSONResponse:
    """Handle domain errors with their stable code and HTTP status."""
    trace_id = extract_trace_id(request)
    log.warning(
        "domain_error",
        code=exc.code,
        error_message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        trace_id=trace_id,
        details=exc.details,
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTPException with standard envelope."""
    trace_id = extract_trace_id(request)
    code = _HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    log.warning(
        "http_exception",
        code=code,
        error_message=str(exc.detail),
        status_code=exc.status_code,
    )
    return create_error_response(
        status_code=exc.status_code,
        code=code,
        message=str(exc.detail),
        trace_id=trace_id,
        headers=getattr(exc, "headers", None),
    )


def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle malformed request payloads (422) with standard envelope."""
    errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]
    return create_error_response(
        status_code=422,
        code="VALIDATION_ERROR",
        message="Invalid request payload",
        trace_id=extract_trace_id(request),
        details={"errors": errors},
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle generic exceptions with standard envelope."""
    log.error(
        "unexpected_error",
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        exc_info=exc,
    )
    return create_error_response(
        status_code=500,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        trace_id=extract_trace_id(request),
    )
