"""Shared API helpers: authentication, service wiring, parsing, timing."""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request
from marshmallow import Schema

from vaxtrack.core.logger import ensure_request_id
from vaxtrack.schemas.common import PaginationQuerySchema
from vaxtrack.services._shared.base import ServiceContext
from vaxtrack.services._shared.dto import Identity, PaginationIn
from vaxtrack.services._shared.errors import InvalidTokenError, NotFoundError
from vaxtrack.services._shared.ports import AuditSink
from vaxtrack.services.tokens.service import TokenService

F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)

TOKEN_SERVICE_KEY = "vaxtrack.token_service"
AUDIT_SINK_KEY = "vaxtrack.audit_sink"

_pagination_schema = PaginationQuerySchema()


# ----------------------------- Wiring ----------------------------------------


def get_token_service() -> TokenService:
    return cast(TokenService, current_app.extensions[TOKEN_SERVICE_KEY])


def get_audit_sink() -> AuditSink:
    return cast(AuditSink, current_app.extensions[AUDIT_SINK_KEY])


def service_context() -> ServiceContext:
    """Build the request-scoped :class:`ServiceContext`."""
    return ServiceContext(
        identity=g.get("identity"),
        request_id=ensure_request_id(),
        ip=request.remote_addr,
    )


# ----------------------------- Authentication --------------------------------


def _bearer_token() -> str:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidTokenError("Missing or malformed Authorization header.")
    return token.strip()


def current_identity() -> Identity:
    """Return the identity verified by :func:`require_auth` for this request."""
    identity = g.get("identity")
    if identity is None:
        raise RuntimeError("current_identity() used outside a require_auth endpoint.")
    return cast(Identity, identity)


def require_auth(func: F) -> F:
    """
    Verify the bearer access token before running the handler.

    On success the :class:`Identity` is stored on ``g.identity``. Any failure
    raises an authentication error rendered as a 401 problem response; the
    handler never runs.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        g.identity = get_token_service().verify_access(_bearer_token())
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(role: str) -> Callable[[F], F]:
    """
    Require an authenticated caller holding ``role``.

    Callers without it get the same 404 a missing resource produces.
    """

    def decorator(func: F) -> F:
        @require_auth
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            if current_identity().role != role:
                raise NotFoundError("Resource", request.path)
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


# ----------------------------- Parsing / responses ---------------------------


def parse_pagination() -> PaginationIn:
    """Parse ``page``, ``limit`` and ``sort`` from ``request.args``."""
    return cast(PaginationIn, _pagination_schema.load(request.args))


def load_json(schema: Schema) -> Any:
    """Validate the JSON body with ``schema``; errors surface as 422."""
    return schema.load(request.get_json(silent=True) or {})


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""
    response = jsonify(payload)
    response.status_code = status
    return response


def no_content() -> Response:
    return Response(status=204)


def timing(func: F) -> F:
    """Decorator logging handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.debug(
                "request.elapsed",
                extra={"endpoint": request.endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
