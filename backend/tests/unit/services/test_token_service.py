"""Unit tests for TokenService: issue, verify, rotate and revoke."""

from __future__ import annotations

from dataclasses import dataclass

import pytest
from freezegun import freeze_time

from vaxtrack.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from vaxtrack.services._shared.errors import (
    InvalidTokenError,
    TokenExpiredError,
    TokenReusedError,
)
from vaxtrack.services._shared.ports import InMemoryRefreshTokenStore, TokenKind
from vaxtrack.services.tokens.dto import AuthTokenConfig
from vaxtrack.services.tokens.service import TokenService


@dataclass
class _User:
    id: int
    role: str = "parent"


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def provider() -> PyJWTTokenProvider:
    return PyJWTTokenProvider(
        access_secret="access-secret-for-tests-0123456789",
        refresh_secret="refresh-secret-for-tests-9876543210",
    )


@pytest.fixture()
def tokens(provider, store) -> TokenService:
    return TokenService(
        provider=provider,
        store=store,
        config=AuthTokenConfig(access_expires=900, refresh_expires=3600),
    )


def _roles(mapping: dict[int, str]):
    return mapping.get


def test_issue_registers_session_and_signs_pair(tokens, store, provider):
    pair = tokens.issue(_User(id=5))

    refresh_claims = provider.decode(TokenKind.REFRESH, pair.refresh_token)
    access_claims = provider.decode(TokenKind.ACCESS, pair.access_token)
    view = store.get(refresh_claims["jti"])
    assert view is not None
    assert view.user_id == 5
    assert view.family_id == pair.family_id == access_claims["fid"]
    assert access_claims["role"] == "parent"
    assert pair.expires_in == 900
    assert pair.token_type == "Bearer"


def test_each_login_opens_a_new_lineage(tokens):
    a = tokens.issue(_User(id=5))
    b = tokens.issue(_User(id=5))
    assert a.family_id != b.family_id


def test_verify_access_returns_identity(tokens):
    pair = tokens.issue(_User(id=5, role="admin"))

    identity = tokens.verify_access(pair.access_token)
    assert identity.user_id == 5
    assert identity.role == "admin"
    assert identity.is_admin
    assert identity.family_id == pair.family_id


def test_verify_rejects_refresh_token_as_access(tokens):
    pair = tokens.issue(_User(id=5))
    with pytest.raises(InvalidTokenError):
        tokens.verify_access(pair.refresh_token)


def test_verify_rejects_revoked_lineage(tokens):
    pair = tokens.issue(_User(id=5))
    tokens.revoke(pair.refresh_token)

    with pytest.raises(InvalidTokenError):
        tokens.verify_access(pair.access_token)


def test_verify_expired_access_token(tokens):
    with freeze_time("2026-01-01 00:00:00"):
        pair = tokens.issue(_User(id=5))
    with freeze_time("2026-01-01 00:20:00"):
        with pytest.raises(TokenExpiredError):
            tokens.verify_access(pair.access_token)


def test_rotate_keeps_lineage_and_role(tokens):
    pair = tokens.issue(_User(id=5))

    rotated = tokens.rotate(pair.refresh_token, _roles({5: "parent"}))
    assert rotated.family_id == pair.family_id
    assert rotated.refresh_token != pair.refresh_token
    assert tokens.verify_access(rotated.access_token).user_id == 5


def test_rotate_picks_up_current_role(tokens):
    pair = tokens.issue(_User(id=5))

    rotated = tokens.rotate(pair.refresh_token, _roles({5: "admin"}))
    assert tokens.verify_access(rotated.access_token).role == "admin"


def test_reuse_revokes_whole_lineage(tokens, store):
    pair = tokens.issue(_User(id=5))
    rotated = tokens.rotate(pair.refresh_token, _roles({5: "parent"}))

    with pytest.raises(TokenReusedError) as excinfo:
        tokens.rotate(pair.refresh_token, _roles({5: "parent"}))
    assert excinfo.value.user_id == 5
    assert excinfo.value.family_id == pair.family_id

    assert not store.is_family_active(pair.family_id)
    with pytest.raises(InvalidTokenError):
        tokens.verify_access(rotated.access_token)
    with pytest.raises(InvalidTokenError):
        tokens.rotate(rotated.refresh_token, _roles({5: "parent"}))


def test_reuse_does_not_touch_other_lineages(tokens):
    first = tokens.issue(_User(id=5))
    second = tokens.issue(_User(id=5))
    tokens.rotate(first.refresh_token, _roles({5: "parent"}))

    with pytest.raises(TokenReusedError):
        tokens.rotate(first.refresh_token, _roles({5: "parent"}))
    assert tokens.verify_access(second.access_token).user_id == 5


def test_rotate_for_deleted_account(tokens):
    pair = tokens.issue(_User(id=5))
    with pytest.raises(InvalidTokenError):
        tokens.rotate(pair.refresh_token, _roles({}))


def test_rotate_rejects_access_token(tokens):
    pair = tokens.issue(_User(id=5))
    with pytest.raises(InvalidTokenError):
        tokens.rotate(pair.access_token, _roles({5: "parent"}))


def test_rotate_expired_refresh_token(tokens):
    with freeze_time("2026-01-01 00:00:00"):
        pair = tokens.issue(_User(id=5))
    with freeze_time("2026-01-01 02:00:00"):
        with pytest.raises(TokenExpiredError):
            tokens.rotate(pair.refresh_token, _roles({5: "parent"}))


def test_refresh_unknown_to_store_is_invalid(provider, store):
    issuer = TokenService(provider=provider, store=InMemoryRefreshTokenStore())
    verifier = TokenService(provider=provider, store=store)
    pair = issuer.issue(_User(id=5))

    with pytest.raises(InvalidTokenError):
        verifier.rotate(pair.refresh_token, _roles({5: "parent"}))


def test_revoke_all_for_user(tokens):
    a = tokens.issue(_User(id=5))
    b = tokens.issue(_User(id=5))
    other = tokens.issue(_User(id=6))

    assert tokens.revoke_all_for_user(5) == 2
    for pair in (a, b):
        with pytest.raises(InvalidTokenError):
            tokens.verify_access(pair.access_token)
    assert tokens.verify_access(other.access_token).user_id == 6
