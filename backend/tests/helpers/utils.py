"""Tiny helpers shared across test modules."""

from __future__ import annotations

from typing import Any

API = "/api/v1"


def bearer(token: str) -> dict[str, str]:
    """Return an ``Authorization`` header for ``token``."""
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str) -> dict[str, Any]:
    """Log in through the API and return the token pair payload."""
    resp = client.post(f"{API}/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


def assert_problem(resp, status: int, code: str) -> dict[str, Any]:
    """Assert an RFC 7807 problem response and return its body."""
    assert resp.status_code == status, resp.get_json()
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    assert body["code"] == code
    assert body["request_id"]
    return body


def ctx_for(user, *, request_id: str = "req-test"):
    """Return a :class:`ServiceContext` acting as ``user`` (no token needed)."""
    from vaxtrack.services._shared.base import ServiceContext
    from vaxtrack.services._shared.dto import Identity

    identity = Identity(user_id=user.id, role=user.role, family_id="fam-test", jti="jti-test")
    return ServiceContext(identity=identity, request_id=request_id, ip="127.0.0.1")
