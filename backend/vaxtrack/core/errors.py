"""Problem Details (RFC 7807) responses for every error the API can return.

Bodies look like::

    {"type": "about:blank", "title": "Not Found", "status": 404,
     "detail": "Child not found", "instance": "/api/v1/children/9",
     "code": "not_found", "request_id": "..."}

``details`` is added only for structured payloads such as field errors.
Database and unexpected failures never leak their message to the client.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from flask_limiter.errors import RateLimitExceeded
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from vaxtrack.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


def status_code_name(status: int) -> str:
    """``404`` -> ``"not_found"``; unknown codes map to ``"error"``."""
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def problem_response(
    status: int,
    detail: str,
    *,
    code: str | None = None,
    details: dict[str, Any] | None = None,
) -> tuple[Response, int]:
    status = int(status)
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code or status_code_name(status),
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details

    (log.error if status >= 500 else log.warning)(
        "request.failed",
        extra={"status": status, "action": body["code"], "endpoint": body["instance"]},
    )
    resp = jsonify(body)
    resp.mimetype = PROBLEM_MIMETYPE
    return resp, status


class APIError(Exception):
    """
    An error that already knows its HTTP shape.

    :param message: Client-safe ``detail`` text.
    :param status_code: HTTP status, ``400`` by default.
    :param code: Stable snake_case identifier clients can branch on.
    :param details: Optional structured payload, e.g. field errors.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = int(status_code)
        if code is not None:
            self.code = code
        self.details = details or {}


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message)


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"

    def __init__(self, message: str = "Unauthorized", code: str | None = None) -> None:
        super().__init__(message, code=code)


class Internal(APIError):
    """Generic 500; the underlying cause is only logged."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    code = "internal_server_error"

    def __init__(self, message: str = "Unexpected error") -> None:
        super().__init__(message)


def init_app(app: Flask) -> None:
    """Register the problem+json handlers, most specific first."""
    from vaxtrack.services._shared.base import translate_exceptions
    from vaxtrack.services._shared.errors import ServiceError

    @app.errorhandler(APIError)
    def _api_error(err: APIError):
        return problem_response(
            err.status_code, err.message, code=err.code, details=err.details or None
        )

    @app.errorhandler(ServiceError)
    def _service_error(err: ServiceError):
        translated = translate_exceptions(err)
        if translated.status_code >= 500:
            log.error("service.error", exc_info=err)
        return _api_error(translated)

    @app.errorhandler(MarshmallowValidationError)
    def _validation_error(err: MarshmallowValidationError):
        return problem_response(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "Validation failed",
            code="validation_error",
            details={"errors": err.messages},
        )

    @app.errorhandler(RateLimitExceeded)
    def _rate_limited(err: RateLimitExceeded):
        # Flask-Limiter adds Retry-After and X-RateLimit-* in after_request
        return problem_response(
            HTTPStatus.TOO_MANY_REQUESTS, "Too many requests. Try again later."
        )

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
        if status == HTTPStatus.NOT_FOUND:
            return problem_response(status, f"Route '{request.path}' not found")
        return problem_response(status, err.description or HTTPStatus(status).phrase)

    @app.errorhandler(IntegrityError)
    def _integrity_error(err: IntegrityError):
        log.error("db.integrity_error", exc_info=err)
        return problem_response(HTTPStatus.CONFLICT, "Resource conflict")

    @app.errorhandler(OperationalError)
    def _operational_error(err: OperationalError):
        # reached only when a call bypassed the retry helper
        log.error("db.operational_error", exc_info=err)
        return problem_response(
            HTTPStatus.SERVICE_UNAVAILABLE, "Service temporarily unavailable"
        )

    @app.errorhandler(Exception)
    def _unexpected_error(err: Exception):
        log.error("unhandled.exception", exc_info=err)
        return problem_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Unexpected error")
