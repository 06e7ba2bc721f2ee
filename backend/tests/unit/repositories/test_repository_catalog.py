"""Unit tests for the catalog and audit log repositories."""

from __future__ import annotations

import pytest

from tests.factories.catalog import VaccineDriveFactory, VaccineFactory
from vaxtrack.models import AuditLogEntry
from vaxtrack.repositories import (
    AuditLogRepository,
    Pagination,
    VaccineDriveRepository,
    VaccineRepository,
)


def test_vaccine_lookup_by_code_is_case_insensitive(session):
    vaccine = VaccineFactory(code="DTP-1")
    session.commit()

    assert VaccineRepository().get_by_code("dtp-1").id == vaccine.id
    assert VaccineRepository().get_by_code("nope") is None


def test_drive_region_filter(session):
    north = VaccineDriveFactory(region="North")
    VaccineDriveFactory(region="South")
    session.commit()

    page = VaccineDriveRepository().paginate(
        Pagination(page=1, limit=10, sort=[]), filters={"region": "North"}
    )
    assert [d.id for d in page.items] == [north.id]


def test_unknown_filter_keys_are_ignored(session):
    VaccineDriveFactory()
    session.commit()

    rows = VaccineDriveRepository().list(filters={"password_hash": "x"})
    assert len(rows) >= 1


def test_audit_log_repository_refuses_delete(session):
    repo = AuditLogRepository()
    entry = repo.add(AuditLogEntry(action="auth.login", outcome="success"))
    session.commit()

    with pytest.raises(PermissionError):
        repo.delete(entry)
