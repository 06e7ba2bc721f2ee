"""End-to-end tests for the caller's profile."""

from __future__ import annotations

from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import API, assert_problem, bearer, login


def test_profile_roundtrip(client, session):
    user = UserFactory(full_name="Mary")
    session.commit()
    headers = bearer(login(client, user.email, DEFAULT_PASSWORD)["access_token"])

    empty = client.get(f"{API}/profile", headers=headers).get_json()["data"]
    assert empty["full_name"] == "Mary"
    assert empty["phone"] is None

    saved = client.put(
        f"{API}/profile", json={"phone": "555-0101", "full_name": "Mary S."}, headers=headers
    )
    assert saved.status_code == 200
    assert saved.get_json()["data"]["phone"] == "555-0101"

    again = client.get(f"{API}/profile", headers=headers).get_json()["data"]
    assert again["full_name"] == "Mary S."


def test_profile_rejects_oversized_fields(client, session):
    user = UserFactory()
    session.commit()
    headers = bearer(login(client, user.email, DEFAULT_PASSWORD)["access_token"])

    resp = client.put(f"{API}/profile", json={"preferred_language": "x" * 20}, headers=headers)
    assert_problem(resp, 422, "validation_error")
