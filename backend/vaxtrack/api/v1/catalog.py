"""Shared catalog endpoints: vaccines and vaccination drives."""

from __future__ import annotations

from flask import Blueprint, request

from vaxtrack.api.deps import (
    json_response,
    load_json,
    parse_pagination,
    require_auth,
    require_role,
    service_context,
    timing,
)
from vaxtrack.models.user import Role
from vaxtrack.schemas import (
    DriveCreateSchema,
    DriveFilterSchema,
    DriveSchema,
    VaccineSchema,
    build_meta,
)
from vaxtrack.services.catalog.service import CatalogService

vaccines_bp = Blueprint("vaccines", __name__, url_prefix="/vaccines")
drives_bp = Blueprint("drives", __name__, url_prefix="/drives")

vaccines_schema = VaccineSchema(many=True)
drive_schema = DriveSchema()
drives_schema = DriveSchema(many=True)
drive_create_schema = DriveCreateSchema()
drive_filter_schema = DriveFilterSchema()


@vaccines_bp.get("")
@require_auth
@timing
def list_vaccines():
    """Return the vaccine schedule ordered by recommended age."""

    items = CatalogService(ctx=service_context()).list_vaccines()
    return json_response({"data": vaccines_schema.dump(items)})


@drives_bp.get("")
@require_auth
@timing
def list_drives():
    filters = drive_filter_schema.load(request.args)
    items, meta = CatalogService(ctx=service_context()).list_drives(
        parse_pagination(), region=filters["region"]
    )
    return json_response({"data": drives_schema.dump(items), "meta": build_meta(meta)})


@drives_bp.get("/<int:drive_id>")
@require_auth
@timing
def get_drive(drive_id: int):
    drive = CatalogService(ctx=service_context()).get_drive(drive_id)
    return json_response({"data": drive_schema.dump(drive)})


@drives_bp.post("")
@require_role(Role.ADMIN.value)
@timing
def create_drive():
    drive = CatalogService(ctx=service_context()).create_drive(load_json(drive_create_schema))
    return json_response({"data": drive_schema.dump(drive)}, status=201)
