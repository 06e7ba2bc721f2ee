"""Unit tests for CatalogService and AuditService admin gating."""

from __future__ import annotations

from datetime import date

import pytest

from tests.factories.catalog import VaccineDriveFactory, VaccineFactory
from tests.factories.user import AdminFactory, UserFactory
from tests.helpers.utils import ctx_for
from vaxtrack.models import AuditLogEntry
from vaxtrack.services._shared.dto import PaginationIn
from vaxtrack.services._shared.errors import DomainValidationError, NotFoundError
from vaxtrack.services.audit.service import AuditService
from vaxtrack.services.catalog.dto import DriveIn
from vaxtrack.services.catalog.service import CatalogService


@pytest.fixture()
def parent(session):
    u = UserFactory()
    session.commit()
    return u


@pytest.fixture()
def admin(session):
    u = AdminFactory()
    session.commit()
    return u


def test_list_vaccines_ordered_by_schedule(parent, session):
    VaccineFactory(code="MMR-1", recommended_age_months=12)
    VaccineFactory(code="BCG", recommended_age_months=0)
    VaccineFactory(code="DTP-1", recommended_age_months=2)
    session.commit()

    codes = [v.code for v in CatalogService(ctx=ctx_for(parent)).list_vaccines()]
    assert codes == ["BCG", "DTP-1", "MMR-1"]


def test_list_drives_filters_by_region(parent, session):
    VaccineDriveFactory(region="North", starts_on=date(2026, 1, 1), ends_on=date(2026, 1, 5))
    VaccineDriveFactory(region="North", starts_on=date(2026, 2, 1), ends_on=date(2026, 2, 5))
    VaccineDriveFactory(region="South")
    session.commit()

    items, meta = CatalogService(ctx=ctx_for(parent)).list_drives(PaginationIn(), region="North")

    assert meta.total == 2
    assert [d.starts_on for d in items] == [date(2026, 2, 1), date(2026, 1, 1)]


def test_get_drive_missing(parent):
    with pytest.raises(NotFoundError):
        CatalogService(ctx=ctx_for(parent)).get_drive(31337)


def test_create_drive_requires_admin(parent, admin):
    dto = DriveIn(name="Polio week", starts_on=date(2026, 5, 1), ends_on=date(2026, 5, 7))

    with pytest.raises(NotFoundError):
        CatalogService(ctx=ctx_for(parent)).create_drive(dto)

    out = CatalogService(ctx=ctx_for(admin)).create_drive(dto)
    assert out.id is not None
    assert CatalogService(ctx=ctx_for(parent)).get_drive(out.id).name == "Polio week"


def test_create_drive_rejects_inverted_dates(admin):
    with pytest.raises(DomainValidationError) as excinfo:
        CatalogService(ctx=ctx_for(admin)).create_drive(
            DriveIn(name="Bad", starts_on=date(2026, 5, 7), ends_on=date(2026, 5, 1))
        )
    assert excinfo.value.field == "ends_on"


def test_audit_listing_is_admin_only(parent, admin, session):
    session.add_all(
        [
            AuditLogEntry(actor_id=parent.id, action="auth.login", outcome="success"),
            AuditLogEntry(actor_id=parent.id, action="auth.login", outcome="failure"),
            AuditLogEntry(actor_id=admin.id, action="auth.logout", outcome="success"),
        ]
    )
    session.commit()

    with pytest.raises(NotFoundError):
        AuditService(ctx=ctx_for(parent)).list(PaginationIn())

    items, meta = AuditService(ctx=ctx_for(admin)).list(
        PaginationIn(), actor_id=parent.id, outcome="failure"
    )
    assert meta.total == 1
    assert items[0].action == "auth.login"
