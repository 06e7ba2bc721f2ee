from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class VaccineRecordIn:
    """
    Input DTO for recording an administered dose.

    :param vaccine_id: Catalog vaccine.
    :param administered_on: Administration date (between birth and today).
    :param drive_id: Campaign the dose was given in, if any.
    :param provider: Clinic or practitioner.
    :param notes: Free text.
    """

    vaccine_id: int
    administered_on: date
    drive_id: int | None = None
    provider: str | None = None
    notes: str | None = None


@dataclass(frozen=True, slots=True)
class VaccineRecordOut:
    id: int
    child_id: int
    vaccine_id: int
    vaccine_code: str
    vaccine_name: str
    administered_on: date
    drive_id: int | None
    provider: str | None
    notes: str | None
