"""End-to-end tests for the authentication endpoints."""

from __future__ import annotations

from sqlalchemy import select

from tests.factories.child import ChildFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory
from tests.helpers.utils import API, assert_problem, bearer, login
from vaxtrack.models import AuditLogEntry, Child, User


def _register(client, email="ada@example.com", password="correct horse"):
    return client.post(
        f"{API}/auth/register",
        json={"email": email, "password": password, "full_name": "Ada"},
    )


def test_register_login_me_logout(client):
    resp = _register(client)
    assert resp.status_code == 201
    body = resp.get_json()["data"]
    assert body["email"] == "ada@example.com"
    assert body["role"] == "parent"
    assert "password" not in body

    pair = login(client, "ada@example.com", "correct horse")
    assert pair["token_type"] == "Bearer"
    assert pair["expires_in"] > 0

    me = client.get(f"{API}/auth/me", headers=bearer(pair["access_token"]))
    assert me.status_code == 200
    assert me.get_json()["data"]["id"] == body["id"]

    out = client.post(f"{API}/auth/logout", headers=bearer(pair["access_token"]))
    assert out.status_code == 204

    again = client.get(f"{API}/auth/me", headers=bearer(pair["access_token"]))
    assert_problem(again, 401, "invalid_token")
    refreshed = client.post(f"{API}/auth/refresh", json={"refresh_token": pair["refresh_token"]})
    assert_problem(refreshed, 401, "invalid_token")


def test_register_duplicate_email(client, session):
    UserFactory(email="taken@example.com")
    session.commit()

    resp = _register(client, email="TAKEN@example.com")
    assert_problem(resp, 409, "conflict")


def test_register_validation_errors(client):
    resp = client.post(f"{API}/auth/register", json={"email": "not-an-email", "password": "short"})
    body = assert_problem(resp, 422, "validation_error")
    assert set(body["details"]["errors"]) == {"email", "password"}


def test_login_wrong_password_and_unknown_email_look_the_same(client, session):
    UserFactory(email="known@example.com")
    session.commit()

    wrong = client.post(f"{API}/auth/login", json={"email": "known@example.com", "password": "x"})
    unknown = client.post(
        f"{API}/auth/login", json={"email": "ghost@example.com", "password": "x"}
    )

    first = assert_problem(wrong, 401, "invalid_credentials")
    second = assert_problem(unknown, 401, "invalid_credentials")
    assert first["detail"] == second["detail"]


def test_missing_or_garbage_bearer(client):
    assert_problem(client.get(f"{API}/auth/me"), 401, "invalid_token")
    resp = client.get(f"{API}/auth/me", headers=bearer("not.a.jwt"))
    assert_problem(resp, 401, "invalid_token")


def test_refresh_rotation_and_reuse_detection(client, session):
    user = UserFactory()
    session.commit()
    email = user.email

    first = login(client, email, DEFAULT_PASSWORD)
    rotated = client.post(f"{API}/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert rotated.status_code == 200
    second = rotated.get_json()["data"]
    assert second["refresh_token"] != first["refresh_token"]

    replay = client.post(f"{API}/auth/refresh", json={"refresh_token": first["refresh_token"]})
    assert_problem(replay, 401, "token_reused")

    # the whole lineage is gone, including the legitimately rotated pair
    latest = client.post(f"{API}/auth/refresh", json={"refresh_token": second["refresh_token"]})
    assert_problem(latest, 401, "invalid_token")
    me = client.get(f"{API}/auth/me", headers=bearer(second["access_token"]))
    assert_problem(me, 401, "invalid_token")

    reuse = session.scalars(
        select(AuditLogEntry).where(AuditLogEntry.action == "auth.refresh_reuse")
    ).all()
    assert len(reuse) == 1
    assert reuse[0].outcome == "failure"


def test_access_token_rejected_as_refresh_token(client, session):
    user = UserFactory()
    session.commit()
    pair = login(client, user.email, DEFAULT_PASSWORD)

    resp = client.post(f"{API}/auth/refresh", json={"refresh_token": pair["access_token"]})
    assert_problem(resp, 401, "invalid_token")


def test_logout_keeps_other_sessions(client, session):
    user = UserFactory()
    session.commit()
    email = user.email
    laptop = login(client, email, DEFAULT_PASSWORD)
    phone = login(client, email, DEFAULT_PASSWORD)

    client.post(f"{API}/auth/logout", headers=bearer(laptop["access_token"]))

    assert client.get(f"{API}/auth/me", headers=bearer(phone["access_token"])).status_code == 200


def test_logout_all_sessions(client, session):
    user = UserFactory()
    session.commit()
    email = user.email
    laptop = login(client, email, DEFAULT_PASSWORD)
    phone = login(client, email, DEFAULT_PASSWORD)

    resp = client.post(
        f"{API}/auth/logout", json={"all_sessions": True}, headers=bearer(laptop["access_token"])
    )
    assert resp.status_code == 204
    assert_problem(
        client.get(f"{API}/auth/me", headers=bearer(phone["access_token"])), 401, "invalid_token"
    )


def test_delete_account(client, session):
    user = UserFactory()
    ChildFactory.create_batch(2, user=user)
    session.commit()
    user_id, email = user.id, user.email
    pair = login(client, email, DEFAULT_PASSWORD)

    resp = client.delete(f"{API}/auth/me", headers=bearer(pair["access_token"]))
    assert resp.status_code == 204

    session.expire_all()
    assert session.get(User, user_id) is None
    assert session.scalars(select(Child).where(Child.user_id == user_id)).all() == []
    assert_problem(
        client.get(f"{API}/auth/me", headers=bearer(pair["access_token"])), 401, "invalid_token"
    )
    deleted = session.scalars(
        select(AuditLogEntry).where(AuditLogEntry.action == "account.delete")
    ).one()
    assert deleted.actor_id == user_id


def test_login_is_rate_limited(client, session):
    user = UserFactory()
    session.commit()
    payload = {"email": user.email, "password": "wrong"}

    statuses = [client.post(f"{API}/auth/login", json=payload).status_code for _ in range(5)]
    assert statuses == [401] * 5

    blocked = client.post(f"{API}/auth/login", json=payload)
    assert_problem(blocked, 429, "too_many_requests")
