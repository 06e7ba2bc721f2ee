"""Access policies shared by services."""

from __future__ import annotations

from vaxtrack.services._shared.dto import Identity
from vaxtrack.services._shared.errors import NotFoundError


def ensure_admin(identity: Identity, *, entity: str = "Resource") -> None:
    """
    Require the explicit admin capability.

    Non-admins see admin-only resources as missing, so the failure is a
    :class:`NotFoundError` rather than a 403.
    """
    if not identity.is_admin:
        raise NotFoundError(entity, "admin")
