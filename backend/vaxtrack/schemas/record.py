"""Vaccine record schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load, validate, validates_schema
from marshmallow import ValidationError as MarshmallowValidationError

from vaxtrack.services.vaccine_records.dto import VaccineRecordIn


class VaccineRecordCreateSchema(Schema):
    vaccine_id = fields.Integer(required=True, validate=validate.Range(min=1))
    administered_on = fields.Date(required=True)
    drive_id = fields.Integer(load_default=None, validate=validate.Range(min=1))
    provider = fields.String(load_default=None, validate=validate.Length(max=120))
    notes = fields.String(load_default=None, validate=validate.Length(max=2000))

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> VaccineRecordIn:
        return VaccineRecordIn(**data)


class VaccineRecordUpdateSchema(Schema):
    vaccine_id = fields.Integer(validate=validate.Range(min=1))
    administered_on = fields.Date()
    drive_id = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    provider = fields.String(allow_none=True, validate=validate.Length(max=120))
    notes = fields.String(allow_none=True, validate=validate.Length(max=2000))

    @validates_schema
    def _not_empty(self, data: dict[str, Any], **_: Any) -> None:
        if not data:
            raise MarshmallowValidationError("No fields to update.")


class VaccineRecordSchema(Schema):
    id = fields.Integer(required=True)
    child_id = fields.Integer(required=True)
    vaccine_id = fields.Integer(required=True)
    vaccine_code = fields.String(required=True)
    vaccine_name = fields.String(required=True)
    administered_on = fields.Date(required=True)
    drive_id = fields.Integer(allow_none=True)
    provider = fields.String(allow_none=True)
    notes = fields.String(allow_none=True)
