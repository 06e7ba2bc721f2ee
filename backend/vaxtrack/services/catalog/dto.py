from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class VaccineOut:
    id: int
    code: str
    name: str
    recommended_age_months: int
    dose_number: int
    description: str | None


@dataclass(frozen=True, slots=True)
class DriveIn:
    """
    Input DTO for a vaccination campaign.

    :param name: Campaign name.
    :param starts_on: First day (inclusive).
    :param ends_on: Last day (inclusive); not before ``starts_on``.
    :param region: Administrative region.
    :param location: Venue or address.
    :param description: Free text (target vaccines, eligibility).
    """

    name: str
    starts_on: date
    ends_on: date
    region: str | None = None
    location: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class DriveOut:
    id: int
    name: str
    region: str | None
    location: str | None
    starts_on: date
    ends_on: date
    description: str | None
