"""Own-profile endpoints."""

from __future__ import annotations

from flask import Blueprint

from vaxtrack.api.deps import json_response, load_json, require_auth, service_context, timing
from vaxtrack.schemas import ProfileSchema, ProfileUpdateSchema
from vaxtrack.services.profiles.service import ProfileService

bp = Blueprint("profile", __name__, url_prefix="/profile")

profile_schema = ProfileSchema()
profile_update_schema = ProfileUpdateSchema()


@bp.get("")
@require_auth
@timing
def get_profile():
    profile = ProfileService(ctx=service_context()).get()
    return json_response({"data": profile_schema.dump(profile)})


@bp.put("")
@require_auth
@timing
def put_profile():
    """Create or update the caller's profile."""

    fields = load_json(profile_update_schema)
    profile = ProfileService(ctx=service_context()).upsert(fields)
    return json_response({"data": profile_schema.dump(profile)})
