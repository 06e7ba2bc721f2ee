"""End-to-end tests for the vaccine catalog and vaccination drives."""

from __future__ import annotations

from datetime import date

import pytest

from tests.factories.catalog import VaccineDriveFactory, VaccineFactory
from tests.factories.user import DEFAULT_PASSWORD, AdminFactory, UserFactory
from tests.helpers.utils import API, assert_problem, bearer, login

NEW_DRIVE = {
    "name": "Spring measles campaign",
    "region": "Coast",
    "starts_on": "2026-04-01",
    "ends_on": "2026-04-30",
}


@pytest.fixture()
def parent_headers(client, session):
    user = UserFactory()
    session.commit()
    return bearer(login(client, user.email, DEFAULT_PASSWORD)["access_token"])


@pytest.fixture()
def admin_headers(client, session):
    admin = AdminFactory()
    session.commit()
    return bearer(login(client, admin.email, DEFAULT_PASSWORD)["access_token"])


def test_vaccines_listed_in_schedule_order(client, session, parent_headers):
    VaccineFactory(code="MMR-1", recommended_age_months=12)
    VaccineFactory(code="BCG", recommended_age_months=0)
    session.commit()

    resp = client.get(f"{API}/vaccines", headers=parent_headers)

    assert resp.status_code == 200
    assert [v["code"] for v in resp.get_json()["data"]] == ["BCG", "MMR-1"]


def test_catalog_requires_authentication(client):
    assert_problem(client.get(f"{API}/vaccines"), 401, "invalid_token")
    assert_problem(client.get(f"{API}/drives"), 401, "invalid_token")


def test_drives_filtered_by_region(client, session, parent_headers):
    north = VaccineDriveFactory(
        region="North", starts_on=date(2026, 6, 1), ends_on=date(2026, 6, 2)
    )
    VaccineDriveFactory(region="South")
    session.commit()
    north_id = north.id

    resp = client.get(f"{API}/drives?region=North", headers=parent_headers)

    body = resp.get_json()
    assert [d["id"] for d in body["data"]] == [north_id]
    assert body["meta"]["total"] == 1
    single = client.get(f"{API}/drives/{north_id}", headers=parent_headers)
    assert single.get_json()["data"]["region"] == "North"


def test_unknown_drive_is_404(client, parent_headers):
    assert_problem(client.get(f"{API}/drives/4040", headers=parent_headers), 404, "not_found")


def test_admin_creates_drive(client, admin_headers, parent_headers):
    resp = client.post(f"{API}/drives", json=NEW_DRIVE, headers=admin_headers)

    assert resp.status_code == 201
    drive_id = resp.get_json()["data"]["id"]
    seen = client.get(f"{API}/drives/{drive_id}", headers=parent_headers)
    assert seen.get_json()["data"]["name"] == "Spring measles campaign"


def test_parent_cannot_create_drive(client, parent_headers):
    resp = client.post(f"{API}/drives", json=NEW_DRIVE, headers=parent_headers)
    assert_problem(resp, 404, "not_found")


def test_drive_date_order_validated(client, admin_headers):
    bad = dict(NEW_DRIVE, starts_on="2026-05-01", ends_on="2026-04-01")
    resp = client.post(f"{API}/drives", json=bad, headers=admin_headers)
    body = assert_problem(resp, 422, "validation_error")
    assert "ends_on" in body["details"]["errors"]
