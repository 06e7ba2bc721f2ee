"""Profile schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class ProfileUpdateSchema(Schema):
    full_name = fields.String(allow_none=True, validate=validate.Length(max=100))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))
    address = fields.String(allow_none=True, validate=validate.Length(max=255))
    preferred_language = fields.String(allow_none=True, validate=validate.Length(max=8))


class ProfileSchema(Schema):
    user_id = fields.Integer(required=True)
    full_name = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    address = fields.String(allow_none=True)
    preferred_language = fields.String(allow_none=True)
