"""Children endpoints, scoped to the authenticated parent."""

from __future__ import annotations

from flask import Blueprint

from vaxtrack.api.deps import (
    json_response,
    load_json,
    no_content,
    parse_pagination,
    require_auth,
    service_context,
    timing,
)
from vaxtrack.schemas import (
    ChildCreateSchema,
    ChildSchema,
    ChildUpdateSchema,
    VaccineRecordCreateSchema,
    VaccineRecordSchema,
    build_meta,
)
from vaxtrack.services.children.service import ChildService
from vaxtrack.services.vaccine_records.service import VaccineRecordService

bp = Blueprint("children", __name__, url_prefix="/children")

child_schema = ChildSchema()
children_schema = ChildSchema(many=True)
child_create_schema = ChildCreateSchema()
child_update_schema = ChildUpdateSchema()
record_schema = VaccineRecordSchema()
records_schema = VaccineRecordSchema(many=True)
record_create_schema = VaccineRecordCreateSchema()


@bp.get("")
@require_auth
@timing
def list_children():
    """Return a paginated list of the caller's children."""

    items, meta = ChildService(ctx=service_context()).list(parse_pagination())
    return json_response({"data": children_schema.dump(items), "meta": build_meta(meta)})


@bp.post("")
@require_auth
@timing
def create_child():
    child = ChildService(ctx=service_context()).create(load_json(child_create_schema))
    return json_response({"data": child_schema.dump(child)}, status=201)


@bp.get("/<int:child_id>")
@require_auth
@timing
def get_child(child_id: int):
    child = ChildService(ctx=service_context()).get(child_id)
    return json_response({"data": child_schema.dump(child)})


@bp.patch("/<int:child_id>")
@require_auth
@timing
def update_child(child_id: int):
    fields = load_json(child_update_schema)
    child = ChildService(ctx=service_context()).update(child_id, fields)
    return json_response({"data": child_schema.dump(child)})


@bp.delete("/<int:child_id>")
@require_auth
@timing
def delete_child(child_id: int):
    ChildService(ctx=service_context()).delete(child_id)
    return no_content()


@bp.get("/<int:child_id>/records")
@require_auth
@timing
def list_child_records(child_id: int):
    """Return the vaccination history of one child, oldest first."""

    service = VaccineRecordService(ctx=service_context())
    items, meta = service.list_for_child(child_id, parse_pagination())
    return json_response({"data": records_schema.dump(items), "meta": build_meta(meta)})


@bp.post("/<int:child_id>/records")
@require_auth
@timing
def create_child_record(child_id: int):
    service = VaccineRecordService(ctx=service_context())
    record = service.create(child_id, load_json(record_create_schema))
    return json_response({"data": record_schema.dump(record)}, status=201)
