"""Vaccine record endpoints; ownership is resolved through the child."""

from __future__ import annotations

from flask import Blueprint

from vaxtrack.api.deps import (
    json_response,
    load_json,
    no_content,
    require_auth,
    service_context,
    timing,
)
from vaxtrack.schemas import VaccineRecordSchema, VaccineRecordUpdateSchema
from vaxtrack.services.vaccine_records.service import VaccineRecordService

bp = Blueprint("records", __name__, url_prefix="/records")

record_schema = VaccineRecordSchema()
record_update_schema = VaccineRecordUpdateSchema()


@bp.get("/<int:record_id>")
@require_auth
@timing
def get_record(record_id: int):
    record = VaccineRecordService(ctx=service_context()).get(record_id)
    return json_response({"data": record_schema.dump(record)})


@bp.patch("/<int:record_id>")
@require_auth
@timing
def update_record(record_id: int):
    fields = load_json(record_update_schema)
    record = VaccineRecordService(ctx=service_context()).update(record_id, fields)
    return json_response({"data": record_schema.dump(record)})


@bp.delete("/<int:record_id>")
@require_auth
@timing
def delete_record(record_id: int):
    VaccineRecordService(ctx=service_context()).delete(record_id)
    return no_content()
