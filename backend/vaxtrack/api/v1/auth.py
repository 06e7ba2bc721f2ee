"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, current_app

from vaxtrack.api.deps import (
    get_audit_sink,
    get_token_service,
    json_response,
    load_json,
    no_content,
    require_auth,
    service_context,
    timing,
)
from vaxtrack.core.extensions import limiter
from vaxtrack.schemas import (
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserSchema,
)
from vaxtrack.services.auth.service import AuthService

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
user_schema = UserSchema()
token_schema = TokenPairSchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


def _service() -> AuthService:
    return AuthService(tokens=get_token_service(), audit=get_audit_sink(), ctx=service_context())


@bp.post("/register")
@timing
def register():
    """Register a new parent account and return the created representation."""

    user = _service().register(load_json(register_schema))
    return json_response({"data": user_schema.dump(user)}, status=201)


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and return an access/refresh token pair."""

    pair = _service().login(load_json(login_schema))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token; a reused token revokes its whole lineage."""

    pair = _service().refresh(load_json(refresh_schema))
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth
@timing
def logout():
    _service().logout(load_json(logout_schema))
    return no_content()


@bp.get("/me")
@require_auth
@timing
def me():
    return json_response({"data": user_schema.dump(_service().me())})


@bp.delete("/me")
@require_auth
@timing
def delete_me():
    """Delete the caller's account together with everything it owns."""

    _service().delete_account()
    return no_content()
