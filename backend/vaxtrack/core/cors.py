"""Cross-origin policy for the JSON API."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

ALLOWED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Authorization", "Content-Type", "X-Request-ID", "X-Correlation-ID"]
EXPOSED_HEADERS = [
    "X-Request-ID",
    "Retry-After",
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "X-RateLimit-Reset",
]


def parse_origins(raw: str | None) -> list[str]:
    """Split the comma-separated ``CORS_ORIGINS`` value, dropping blanks."""
    return [origin.strip() for origin in (raw or "").split(",") if origin.strip()]


def init_app(app: Flask) -> None:
    """Allow the configured front-end origins to call ``/api/*``.

    Bearer tokens travel in the ``Authorization`` header, never in cookies,
    so credentials support stays off. An empty list or ``"*"`` opens the API
    to any origin (development only).
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins if origins and origins != ["*"] else "*"}},
        methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        expose_headers=EXPOSED_HEADERS,
        supports_credentials=False,
        max_age=int(app.config.get("CORS_MAX_AGE", 600)),
    )
