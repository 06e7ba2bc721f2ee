"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from vaxtrack.repositories.audit_log import AuditLogRepository
from vaxtrack.repositories.base import BaseRepository, Page, Pagination, paginate_select
from vaxtrack.repositories.child import ChildRepository
from vaxtrack.repositories.drive import VaccineDriveRepository
from vaxtrack.repositories.profile import ProfileRepository
from vaxtrack.repositories.scoped import AccessScope, OwnerScopedRepository
from vaxtrack.repositories.user import UserRepository
from vaxtrack.repositories.vaccine import VaccineRepository
from vaxtrack.repositories.vaccine_record import VaccineRecordRepository

__all__ = [
    "AccessScope",
    "AuditLogRepository",
    "BaseRepository",
    "ChildRepository",
    "OwnerScopedRepository",
    "Page",
    "Pagination",
    "ProfileRepository",
    "UserRepository",
    "VaccineDriveRepository",
    "VaccineRecordRepository",
    "VaccineRepository",
    "paginate_select",
]
