from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

import redis  # type: ignore[import-untyped]

from vaxtrack.services._shared.ports import (
    RefreshSessionView,
    RefreshTokenStore,
    RotationResult,
    as_utc,
)
from vaxtrack.services._shared.retry import call_with_retry

# A family stays revoked at least this long after its last session expires
FAMILY_MARKER_TTL = 8 * 24 * 3600


def _s(raw: bytes | str | None, default: str = "") -> str:
    if raw is None:
        return default
    return raw.decode() if isinstance(raw, bytes | bytearray) else str(raw)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh session store.

    Layout: one hash per session (``rt:<jti>``), a set of jtis per user
    (``rt:u:<user_id>``) and per lineage (``rt:f:<family_id>``), and a
    ``rt:f:<family_id>:revoked`` marker. Rotation uses WATCH/MULTI/EXEC and
    retries on :class:`redis.WatchError`.

    :param r: Connected Redis client.
    """

    r: redis.Redis

    @staticmethod
    def _k(jti: str) -> str:
        return f"rt:{jti}"

    @staticmethod
    def _ku(user_id: int | str) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _kf(family_id: str) -> str:
        return f"rt:f:{family_id}"

    @staticmethod
    def _kf_revoked(family_id: str) -> str:
        return f"rt:f:{family_id}:revoked"

    @staticmethod
    def _ts(dt: datetime) -> int:
        return int(as_utc(dt).timestamp())

    def register(
        self,
        *,
        jti: str,
        user_id: int,
        family_id: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> None:
        ttl = max(1, self._ts(expires_at) - self._ts(datetime.now(timezone.utc)))

        def _write() -> None:
            pipe = self.r.pipeline(transaction=True)
            pipe.hset(
                self._k(jti),
                mapping={
                    "user_id": str(user_id),
                    "family_id": family_id,
                    "issued_at": str(self._ts(issued_at)),
                    "expires_at": str(self._ts(expires_at)),
                    "used": "0",
                    "revoked": "0",
                },
            )
            pipe.expire(self._k(jti), ttl)
            pipe.sadd(self._ku(user_id), jti)
            pipe.sadd(self._kf(family_id), jti)
            pipe.expire(self._kf(family_id), FAMILY_MARKER_TTL)
            pipe.execute()

        call_with_retry(_write)

    def rotate(
        self,
        *,
        old_jti: str,
        new_jti: str,
        now: datetime,
        new_expires_at: datetime,
    ) -> RotationResult:
        return call_with_retry(
            lambda: self._rotate(
                old_jti=old_jti, new_jti=new_jti, now=now, new_expires_at=new_expires_at
            )
        )

    def _rotate(
        self, *, old_jti: str, new_jti: str, now: datetime, new_expires_at: datetime
    ) -> RotationResult:
        now_ts = self._ts(now)
        new_exp_ts = self._ts(new_expires_at)
        k_old = self._k(old_jti)
        k_new = self._k(new_jti)

        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(k_old, k_new)
                    h = p.hgetall(k_old)
                    if not h:
                        p.unwatch()
                        return RotationResult.NOT_FOUND

                    family_id = _s(h.get(b"family_id"))
                    if _s(h.get(b"revoked"), "0") == "1" or p.exists(
                        self._kf_revoked(family_id)
                    ):
                        p.unwatch()
                        return RotationResult.REVOKED
                    if _s(h.get(b"used"), "0") == "1":
                        p.unwatch()
                        return RotationResult.REUSED
                    if int(_s(h.get(b"expires_at"), "0")) <= now_ts:
                        p.unwatch()
                        return RotationResult.EXPIRED

                    uid = _s(h.get(b"user_id"))
                    p.multi()
                    p.hset(k_old, mapping={"used": "1", "replaced_by": new_jti})
                    p.hset(
                        k_new,
                        mapping={
                            "user_id": uid,
                            "family_id": family_id,
                            "issued_at": str(now_ts),
                            "expires_at": str(new_exp_ts),
                            "used": "0",
                            "revoked": "0",
                        },
                    )
                    p.expire(k_new, max(1, new_exp_ts - now_ts))
                    p.sadd(self._ku(uid), new_jti)
                    p.sadd(self._kf(family_id), new_jti)
                    p.expire(self._kf(family_id), FAMILY_MARKER_TTL)
                    p.execute()
                return RotationResult.OK
            except redis.WatchError:
                continue

    def get(self, jti: str) -> RefreshSessionView | None:
        h = call_with_retry(lambda: self.r.hgetall(self._k(jti)))
        if not h:
            return None
        family_id = _s(h.get(b"family_id"))
        revoked = _s(h.get(b"revoked"), "0") == "1" or bool(
            self.r.exists(self._kf_revoked(family_id))
        )
        return RefreshSessionView(
            jti=jti,
            user_id=int(_s(h.get(b"user_id"), "0")),
            family_id=family_id,
            issued_at=datetime.fromtimestamp(int(_s(h.get(b"issued_at"), "0")), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(_s(h.get(b"expires_at"), "0")), tz=timezone.utc),
            used=_s(h.get(b"used"), "0") == "1",
            revoked=revoked,
            replaced_by=_s(h.get(b"replaced_by")) or None,
        )

    def _revoke_jtis(self, jtis: list[str], families: set[str]) -> int:
        pipe = self.r.pipeline(transaction=True)
        for j in jtis:
            pipe.hset(self._k(j), "revoked", "1")
        for family_id in families:
            pipe.set(self._kf_revoked(family_id), "1", ex=FAMILY_MARKER_TTL)
        pipe.execute()
        return len(jtis)

    def revoke_family(self, family_id: str) -> int:
        def _revoke() -> int:
            jtis = sorted(_s(m) for m in self.r.smembers(self._kf(family_id)))
            live = [j for j in jtis if self.r.exists(self._k(j))]
            return self._revoke_jtis(live, {family_id})

        return call_with_retry(_revoke)

    def revoke_all_for_user(self, user_id: int) -> int:
        def _revoke() -> int:
            jtis = sorted(_s(m) for m in self.r.smembers(self._ku(user_id)))
            live: list[str] = []
            families: set[str] = set()
            for j in jtis:
                family_id = self.r.hget(self._k(j), "family_id")
                if family_id is None:
                    continue
                live.append(j)
                families.add(_s(family_id))
            count = self._revoke_jtis(live, families)
            self.r.delete(self._ku(user_id))
            return count

        return call_with_retry(_revoke)

    def is_family_active(self, family_id: str) -> bool:
        def _check() -> bool:
            if self.r.exists(self._kf_revoked(family_id)):
                return False
            return bool(self.r.exists(self._kf(family_id)))

        return call_with_retry(_check)
