"""
Tests de l'enveloppe d'erreur standard et des gestionnaires d'exceptions.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock

from fastapi import HTTPException

from backend.apigw.errors import (
    create_error_response,
    extract_trace_id,
    handle_brand_error,
    handle_generic_exception,
    handle_http_exception,
)
from backend.core.http_constants import (
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_UNAUTHORIZED,
)
from backend.domain.errors import ConcurrentVersionConflict, NotFoundError


def _request(header: str | None = None, request_id: str | None = None) -> MagicMock:
    request = MagicMock()
    request.headers = {"X-Trace-ID": header} if header else {}
    request.state = MagicMock()
    request.state.request_id = request_id
    return request


def _body(response) -> dict:
    return json.loads(response.body.decode())


class TestErrorEnvelope:
    """Enveloppe `{code, message, trace_id, details?}`."""

    def test_create_error_response(self) -> None:
        response = create_error_response(
            status_code=404,
            code="NOT_FOUND",
            message="Brand profile not found",
            trace_id="trace-1",
            details={"profile_id": "p1"},
        )
        assert response.status_code == HTTP_NOT_FOUND
        assert _body(response) == {
            "code": "NOT_FOUND",
            "message": "Brand profile not found",
            "trace_id": "trace-1",
            "details": {"profile_id": "p1"},
        }

    def test_details_omitted_when_empty(self) -> None:
        response = create_error_response(status_code=500, code="INTERNAL_ERROR", message="x")
        assert "details" not in _body(response)
        assert _body(response)["trace_id"] is None

    def test_trace_id_prefers_header(self) -> None:
        assert extract_trace_id(_request("hdr", "req")) == "hdr"
        assert extract_trace_id(_request(None, "req")) == "req"
        assert extract_trace_id(_request()) is None


class TestHandlers:
    def test_brand_error_keeps_code_and_status(self) -> None:
        exc = ConcurrentVersionConflict("Could not allocate a version number")
        response = handle_brand_error(_request(request_id="req-9"), exc)
        assert response.status_code == HTTP_CONFLICT
        assert _body(response)["code"] == "CONFLICT"
        assert _body(response)["trace_id"] == "req-9"

    def test_not_found_details(self) -> None:
        exc = NotFoundError("Version not found", details={"version_id": 3})
        response = handle_brand_error(_request(), exc)
        assert response.status_code == HTTP_NOT_FOUND
        assert _body(response)["details"] == {"version_id": 3}

    def test_http_exception(self) -> None:
        response = handle_http_exception(
            _request(), HTTPException(status_code=401, detail="invalid_token")
        )
        assert response.status_code == HTTP_UNAUTHORIZED
        assert _body(response) == {
            "code": "UNAUTHORIZED",
            "message": "invalid_token",
            "trace_id": None,
        }

    def test_generic_exception_hides_message(self) -> None:
        response = handle_generic_exception(_request(), RuntimeError("db password is hunter2"))
        assert response.status_code == HTTP_INTERNAL_SERVER_ERROR
        assert "hunter2" not in response.body.decode()
