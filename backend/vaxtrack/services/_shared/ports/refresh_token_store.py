from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Protocol
from uuid import uuid4


class RotationResult(Enum):
    """Outcome of an atomic refresh rotation attempt."""

    OK = auto()
    NOT_FOUND = auto()
    EXPIRED = auto()
    REVOKED = auto()
    REUSED = auto()


@dataclass(frozen=True, slots=True)
class RefreshSessionView:
    """
    Read-model for one refresh session.

    :ivar jti: Refresh token identifier.
    :ivar user_id: Owner user id.
    :ivar family_id: Rotation lineage shared by all descendants of one login.
    :ivar issued_at: Issue time (UTC).
    :ivar expires_at: Absolute expiration (UTC).
    :ivar used: Consumed by a rotation.
    :ivar revoked: Lineage revoked (logout, reuse detection).
    :ivar replaced_by: ``jti`` of the successor, once rotated.
    """

    jti: str
    user_id: int
    family_id: str
    issued_at: datetime
    expires_at: datetime
    used: bool
    revoked: bool
    replaced_by: str | None = None


class RefreshTokenStore(Protocol):
    """
    Server-side state of refresh sessions.

    ``rotate`` MUST be a single atomic check-and-set: of two concurrent
    rotations of the same ``jti`` exactly one returns ``OK``.
    """

    def new_jti(self) -> str:
        return uuid4().hex

    def new_family_id(self) -> str:
        return uuid4().hex

    def register(
        self,
        *,
        jti: str,
        user_id: int,
        family_id: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> None:
        """Persist a new session. Runs *before* the token is handed out."""

    def rotate(
        self,
        *,
        old_jti: str,
        new_jti: str,
        now: datetime,
        new_expires_at: datetime,
    ) -> RotationResult:
        """Consume ``old_jti`` and register ``new_jti`` in the same lineage."""

    def get(self, jti: str) -> RefreshSessionView | None: ...

    def revoke_family(self, family_id: str) -> int:
        """Revoke every session of a lineage. :returns: rows affected."""

    def revoke_all_for_user(self, user_id: int) -> int:
        """Revoke every session of a user. :returns: rows affected."""

    def is_family_active(self, family_id: str) -> bool:
        """``True`` while at least one session of the lineage is not revoked."""


def as_utc(dt: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Process-local store; a lock makes ``rotate`` atomic across threads.

    Used as the unit-test double for :class:`RefreshTokenStore`.
    """

    def __init__(self) -> None:
        self._by_jti: dict[str, RefreshSessionView] = {}
        self._lock = threading.Lock()

    def register(
        self,
        *,
        jti: str,
        user_id: int,
        family_id: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> None:
        with self._lock:
            self._by_jti[jti] = RefreshSessionView(
                jti=jti,
                user_id=int(user_id),
                family_id=family_id,
                issued_at=as_utc(issued_at),
                expires_at=as_utc(expires_at),
                used=False,
                revoked=False,
            )

    def rotate(
        self,
        *,
        old_jti: str,
        new_jti: str,
        now: datetime,
        new_expires_at: datetime,
    ) -> RotationResult:
        now = as_utc(now)
        with self._lock:
            s = self._by_jti.get(old_jti)
            if s is None:
                return RotationResult.NOT_FOUND
            if s.revoked:
                return RotationResult.REVOKED
            if s.used:
                return RotationResult.REUSED
            if s.expires_at <= now:
                return RotationResult.EXPIRED
            self._by_jti[old_jti] = replace(s, used=True, replaced_by=new_jti)
            self._by_jti[new_jti] = RefreshSessionView(
                jti=new_jti,
                user_id=s.user_id,
                family_id=s.family_id,
                issued_at=now,
                expires_at=as_utc(new_expires_at),
                used=False,
                revoked=False,
            )
            return RotationResult.OK

    def get(self, jti: str) -> RefreshSessionView | None:
        return self._by_jti.get(jti)

    def revoke_family(self, family_id: str) -> int:
        with self._lock:
            hits = [
                j for j, s in self._by_jti.items() if s.family_id == family_id and not s.revoked
            ]
            for j in hits:
                self._by_jti[j] = replace(self._by_jti[j], revoked=True)
            return len(hits)

    def revoke_all_for_user(self, user_id: int) -> int:
        with self._lock:
            hits = [
                j for j, s in self._by_jti.items() if s.user_id == int(user_id) and not s.revoked
            ]
            for j in hits:
                self._by_jti[j] = replace(self._by_jti[j], revoked=True)
            return len(hits)

    def is_family_active(self, family_id: str) -> bool:
        return any(s.family_id == family_id and not s.revoked for s in self._by_jti.values())
