"""Vaccine catalog and vaccination drive schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate, validates_schema
from marshmallow import ValidationError as MarshmallowValidationError

from vaxtrack.services.catalog.dto import DriveIn


class VaccineSchema(Schema):
    id = fields.Integer(required=True)
    code = fields.String(required=True)
    name = fields.String(required=True)
    recommended_age_months = fields.Integer(required=True)
    dose_number = fields.Integer(required=True)
    description = fields.String(allow_none=True)


class DriveCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    starts_on = fields.Date(required=True)
    ends_on = fields.Date(required=True)
    region = fields.String(load_default=None, validate=validate.Length(max=120))
    location = fields.String(load_default=None, validate=validate.Length(max=255))
    description = fields.String(load_default=None)

    @validates_schema
    def _date_range(self, data: dict[str, Any], **_: Any) -> None:
        if data["ends_on"] < data["starts_on"]:
            raise MarshmallowValidationError("ends_on must not precede starts_on.", "ends_on")

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> DriveIn:
        return DriveIn(**data)


class DriveFilterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    region = fields.String(load_default=None)


class DriveSchema(Schema):
    id = fields.Integer(required=True)
    name = fields.String(required=True)
    region = fields.String(allow_none=True)
    location = fields.String(allow_none=True)
    starts_on = fields.Date(required=True)
    ends_on = fields.Date(required=True)
    description = fields.String(allow_none=True)
