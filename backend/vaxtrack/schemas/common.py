"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from vaxtrack.services._shared.dto import PageMeta, PaginationIn


class PaginationQuerySchema(Schema):
    """Parse ``page``, ``limit`` and comma-separated ``sort`` query parameters."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(load_default=20, validate=validate.Range(min=1, max=100))
    sort = fields.String(load_default="")

    @post_load
    def to_dto(self, data: dict[str, Any], **_: Any) -> PaginationIn:
        tokens = [segment.strip() for segment in (data.get("sort") or "").split(",")]
        return PaginationIn(
            page=data["page"], limit=data["limit"], sort=[t for t in tokens if t]
        )


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    has_prev = fields.Boolean(required=True)
    has_next = fields.Boolean(required=True)


def build_meta(meta: PageMeta) -> dict[str, Any]:
    """Return a ``meta`` mapping for paginated responses."""
    return MetaSchema().dump(meta)
