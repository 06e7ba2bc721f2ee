"""Audit log schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class AuditFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    actor_id = fields.Integer(load_default=None)
    action = fields.String(load_default=None)
    outcome = fields.String(load_default=None, validate=validate.OneOf(("success", "failure")))


class AuditEntrySchema(Schema):
    id = fields.Integer(required=True)
    occurred_at = fields.DateTime(required=True)
    actor_id = fields.Integer(allow_none=True)
    action = fields.String(required=True)
    outcome = fields.String(required=True)
    target = fields.String(allow_none=True)
    ip = fields.String(allow_none=True)
    request_id = fields.String(allow_none=True)
    detail = fields.Dict(allow_none=True)
