"""JSON log lines on stdout, correlated by a per-request identifier.

Every record emitted while a request is active carries ``request_id``. The
identifier comes from ``X-Request-ID`` (or ``X-Correlation-ID``) when the
client supplies a usable one, otherwise a UUID4 is minted. The same value is
echoed back in the ``X-Request-ID`` response header and stored on audit rows.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
INBOUND_ID_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")
MAX_INBOUND_ID_LENGTH = 128

# Whitelist of ``extra=`` attributes promoted into the JSON line.
EXTRA_KEYS = (
    "endpoint",
    "method",
    "status",
    "elapsed_ms",
    "user_id",
    "family_id",
    "action",
    "outcome",
    "child_id",
    "record_id",
    "attempt",
    "store",
)

access_logger = logging.getLogger("vaxtrack.access")


def _usable(value: str | None) -> bool:
    return bool(value) and len(value) <= MAX_INBOUND_ID_LENGTH and value.isprintable()


def ensure_request_id() -> str:
    """
    Return the identifier of the active request.

    The first call within a request resolves it (inbound header or a fresh
    UUID4) and caches it on :data:`flask.g`; later calls return the cached
    value. Outside a request a throwaway UUID4 is returned.
    """
    if not has_request_context():
        return str(uuid4())

    cached = g.get("request_id")
    if cached:
        return cached

    inbound = (request.headers.get(name) for name in INBOUND_ID_HEADERS)
    g.request_id = next((v for v in inbound if _usable(v)), None) or str(uuid4())
    return g.request_id


class RequestIdFilter(logging.Filter):
    """Stamp ``request_id`` on each record (``None`` outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record; unknown ``extra`` attributes are dropped."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "time": stamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update(
            {key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)}
        )
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str | int = "INFO") -> None:
    """Replace root handlers with a single JSON stdout handler."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    # The access line below replaces werkzeug's plain-text one.
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def init_app(app: Flask) -> None:
    """Register the request-id hooks and the per-request access line."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _start_request() -> None:
        g.pop("request_id", None)
        g.request_started = time.perf_counter()
        ensure_request_id()

    @app.after_request
    def _finish_request(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        started = g.pop("request_started", None)
        if started is not None:
            access_logger.info(
                "request.completed",
                extra={
                    "endpoint": request.endpoint,
                    "method": request.method,
                    "status": response.status_code,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
        return response


__all__ = ["configure_logging", "ensure_request_id", "init_app"]
