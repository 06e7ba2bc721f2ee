"""Child repository: owner-scoped on ``children.user_id``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import InstrumentedAttribute

from vaxtrack.models.child import Child
from vaxtrack.repositories.scoped import OwnerScopedRepository


class ChildRepository(OwnerScopedRepository[Child]):
    """Children visible to the caller; foreign rows read as missing."""

    model = Child
    entity_name = "Child"

    def _owner_column(self):
        return Child.user_id

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": Child.id,
            "first_name": Child.first_name,
            "last_name": Child.last_name,
            "date_of_birth": Child.date_of_birth,
            "created_at": Child.created_at,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {"sex": Child.sex}

    def _updatable_fields(self) -> set[str]:
        # user_id is deliberately absent: ownership never changes
        return {"first_name", "last_name", "date_of_birth", "sex"}
