"""Infrastructure adapters and their wiring into the Flask app."""

from __future__ import annotations

import logging

from flask import Flask

from vaxtrack.services._shared.ports import RefreshTokenStore

logger = logging.getLogger(__name__)


def build_refresh_store(app: Flask) -> RefreshTokenStore:
    """Return the refresh session store selected by ``REFRESH_STORE_BACKEND``."""
    backend = str(app.config.get("REFRESH_STORE_BACKEND", "sql")).lower()
    if backend == "redis":
        from vaxtrack.core.extensions import get_redis
        from vaxtrack.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(get_redis(app))

    from vaxtrack.infra.sql.sql_refresh_token_store import SqlRefreshTokenStore

    return SqlRefreshTokenStore()


def init_app(app: Flask) -> None:
    """Register the token service and audit sink in ``app.extensions``."""
    from vaxtrack.api.deps import AUDIT_SINK_KEY, TOKEN_SERVICE_KEY
    from vaxtrack.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
    from vaxtrack.infra.sql.sql_audit_sink import SqlAuditSink
    from vaxtrack.services.tokens.dto import AuthTokenConfig
    from vaxtrack.services.tokens.service import TokenService

    store = build_refresh_store(app)
    app.extensions[TOKEN_SERVICE_KEY] = TokenService(
        provider=PyJWTTokenProvider.from_config(app.config),
        store=store,
        config=AuthTokenConfig.from_config(app.config),
    )
    app.extensions[AUDIT_SINK_KEY] = SqlAuditSink()
    logger.info("infra.wired", extra={"store": type(store).__name__})
