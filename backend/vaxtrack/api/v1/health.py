"""Unauthenticated liveness probe used by load balancers and uptime checks."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from vaxtrack.api.deps import json_response, timing
from vaxtrack.core.extensions import db

logger = logging.getLogger(__name__)

bp = Blueprint("health", __name__)


def _database_reachable() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("health.db_unreachable")
        db.session.rollback()
        return False
    return True


@bp.get("/health")
@timing
def healthcheck():
    """Always 200 while the process serves; ``db`` reports ``ok`` or ``fail``."""
    cfg = current_app.config
    return json_response(
        {
            "status": "ok",
            "db": "ok" if _database_reachable() else "fail",
            "version": cfg.get("APP_VERSION", "dev"),
            "commit": cfg.get("APP_COMMIT", "unknown"),
        }
    )
