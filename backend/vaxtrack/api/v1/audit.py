"""Audit log read endpoint (admin only)."""

from __future__ import annotations

from flask import Blueprint, request

from vaxtrack.api.deps import json_response, parse_pagination, require_role, service_context, timing
from vaxtrack.models.user import Role
from vaxtrack.schemas import AuditEntrySchema, AuditFilterSchema, build_meta
from vaxtrack.services.audit.service import AuditService

bp = Blueprint("audit", __name__, url_prefix="/audit")

entries_schema = AuditEntrySchema(many=True)
filter_schema = AuditFilterSchema()


@bp.get("")
@require_role(Role.ADMIN.value)
@timing
def list_audit_entries():
    """Return audit entries, newest first, optionally filtered."""

    filters = filter_schema.load(request.args)
    items, meta = AuditService(ctx=service_context()).list(parse_pagination(), **filters)
    return json_response({"data": entries_schema.dump(items), "meta": build_meta(meta)})
