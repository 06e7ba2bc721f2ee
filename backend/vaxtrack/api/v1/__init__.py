"""Version 1 of the HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .audit import bp as audit_bp
from .auth import bp as auth_bp
from .catalog import drives_bp, vaccines_bp
from .children import bp as children_bp
from .health import bp as health_bp
from .profile import bp as profile_bp
from .records import bp as records_bp

API_VERSION = "v1"

# (blueprint, relative_prefix) pairs mounted under ``{API_BASE_PREFIX}/v1``.
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
    (profile_bp, "/profile"),
    (children_bp, "/children"),
    (records_bp, "/records"),
    (vaccines_bp, "/vaccines"),
    (drives_bp, "/drives"),
    (audit_bp, "/audit"),
]

__all__ = ["API_VERSION", "REGISTRY"]
