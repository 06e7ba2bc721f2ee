"""Vaccine record repository, scoped transitively through the owning child."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select
from sqlalchemy.orm import InstrumentedAttribute

from vaxtrack.models.child import Child
from vaxtrack.models.vaccine import VaccineRecord
from vaxtrack.repositories.scoped import OwnerScopedRepository


class VaccineRecordRepository(OwnerScopedRepository[VaccineRecord]):
    """
    Records visible to the caller.

    Ownership lives on ``children.user_id``; every query joins ``children``
    so a record of another user's child never matches.
    """

    model = VaccineRecord
    entity_name = "VaccineRecord"

    def _join_owner(self, stmt: Select[Any]) -> Select[Any]:
        return stmt.join(Child, VaccineRecord.child_id == Child.id)

    def _owner_column(self):
        return Child.user_id

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": VaccineRecord.id,
            "administered_on": VaccineRecord.administered_on,
            "created_at": VaccineRecord.created_at,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "child_id": VaccineRecord.child_id,
            "vaccine_id": VaccineRecord.vaccine_id,
            "drive_id": VaccineRecord.drive_id,
        }

    def _updatable_fields(self) -> set[str]:
        return {"vaccine_id", "drive_id", "administered_on", "provider", "notes"}
