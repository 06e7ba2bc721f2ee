"""Vaccine catalog repository (shared, unscoped reads)."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from vaxtrack.models.vaccine import Vaccine
from vaxtrack.repositories.base import BaseRepository


class VaccineRepository(BaseRepository[Vaccine]):
    model = Vaccine

    def _sortable_fields(self):
        return {
            "id": Vaccine.id,
            "code": Vaccine.code,
            "name": Vaccine.name,
            "recommended_age_months": Vaccine.recommended_age_months,
        }

    def _filterable_fields(self):
        return {"code": Vaccine.code, "dose_number": Vaccine.dose_number}

    def get_by_code(self, code: str) -> Vaccine | None:
        stmt = select(Vaccine).where(Vaccine.code == code.strip().upper())
        return cast(Vaccine | None, self.session.execute(stmt).scalars().first())
