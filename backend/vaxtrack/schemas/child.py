"""Child resource schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate, validates_schema
from marshmallow import ValidationError as MarshmallowValidationError

from vaxtrack.models.child import SEX_VALUES
from vaxtrack.services.children.dto import ChildIn


class ChildCreateSchema(Schema):
    first_name = fields.String(required=True, validate=validate.Length(min=1, max=80))
    last_name = fields.String(load_default=None, validate=validate.Length(max=80))
    date_of_birth = fields.Date(required=True)
    sex = fields.String(load_default="unspecified", validate=validate.OneOf(SEX_VALUES))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> ChildIn:
        return ChildIn(**data)


class ChildUpdateSchema(Schema):
    """Partial update; at least one field is required."""

    first_name = fields.String(validate=validate.Length(min=1, max=80))
    last_name = fields.String(allow_none=True, validate=validate.Length(max=80))
    date_of_birth = fields.Date()
    sex = fields.String(validate=validate.OneOf(SEX_VALUES))

    @validates_schema
    def _not_empty(self, data: dict[str, Any], **_: Any) -> None:
        if not data:
            raise MarshmallowValidationError("No fields to update.")


class ChildSchema(Schema):
    id = fields.Integer(required=True)
    first_name = fields.String(required=True)
    last_name = fields.String(allow_none=True)
    date_of_birth = fields.Date(required=True)
    sex = fields.String(required=True)
