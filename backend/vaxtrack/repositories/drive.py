"""Vaccination drive repository (shared catalog)."""

from __future__ import annotations

from vaxtrack.models.drive import VaccineDrive
from vaxtrack.repositories.base import BaseRepository


class VaccineDriveRepository(BaseRepository[VaccineDrive]):
    model = VaccineDrive

    def _sortable_fields(self):
        return {
            "id": VaccineDrive.id,
            "name": VaccineDrive.name,
            "starts_on": VaccineDrive.starts_on,
            "ends_on": VaccineDrive.ends_on,
        }

    def _filterable_fields(self):
        return {"region": VaccineDrive.region}
