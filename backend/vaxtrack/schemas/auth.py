"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate

from vaxtrack.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True, load_only=True, validate=validate.Length(min=8, max=128)
    )
    full_name = fields.String(load_default=None, validate=validate.Length(max=100))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> RegisterIn:
        return RegisterIn(**data)


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(
        required=True, load_only=True, validate=validate.Length(min=1, max=128)
    )

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> LoginIn:
        return LoginIn(**data)


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> RefreshIn:
        return RefreshIn(**data)


class LogoutSchema(Schema):
    refresh_token = fields.String(load_default=None)
    all_sessions = fields.Boolean(load_default=False)

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> LogoutIn:
        return LogoutIn(**data)


class TokenPairSchema(Schema):
    """Response payload of login and refresh."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(required=True)
    expires_in = fields.Integer(required=True)


class UserSchema(Schema):
    """Public account representation."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    role = fields.String(required=True)
    full_name = fields.String(allow_none=True)
    created_at = fields.DateTime(allow_none=True)
