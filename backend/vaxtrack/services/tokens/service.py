"""Issue, verify, rotate and revoke signed tokens."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol
from uuid import uuid4

from vaxtrack.services._shared.dto import Identity
from vaxtrack.services._shared.errors import (
    InvalidTokenError,
    TokenExpiredError,
    TokenReusedError,
)
from vaxtrack.services._shared.ports import (
    RefreshTokenStore,
    RotationResult,
    TokenKind,
    TokenProvider,
)
from vaxtrack.services.tokens.dto import AuthTokenConfig, TokenPair

logger = logging.getLogger(__name__)

RoleLookup = Callable[[int], "str | None"]


class _Principal(Protocol):
    id: int
    role: str


def _subject(claims: dict[str, Any]) -> int:
    try:
        return int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidTokenError() from exc


class TokenService:
    """
    Owns token policy: signing, expiry, rotation and lineage revocation.

    Every login opens a *lineage* (``family_id``). Access tokens carry it as
    ``fid`` so revoking the lineage also invalidates access tokens issued
    from it. Verification is the signature/expiry check followed by one
    lookup of the lineage in the refresh store.
    """

    def __init__(
        self,
        *,
        provider: TokenProvider,
        store: RefreshTokenStore,
        config: AuthTokenConfig | None = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.config = config or AuthTokenConfig()

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(timezone.utc)

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue(self, user: _Principal) -> TokenPair:
        """
        Open a new lineage for ``user`` and return its first token pair.

        The refresh session is registered before anything is signed.
        """
        return self._sign_pair(
            user_id=int(user.id), role=str(user.role), family_id=self.store.new_family_id()
        )

    def _sign_pair(
        self, *, user_id: int, role: str, family_id: str, refresh_jti: str | None = None
    ) -> TokenPair:
        if refresh_jti is None:
            refresh_jti = self.store.new_jti()
            now = self.now_utc()
            self.store.register(
                jti=refresh_jti,
                user_id=user_id,
                family_id=family_id,
                issued_at=now,
                expires_at=now + timedelta(seconds=self.config.refresh_expires),
            )

        access = self.provider.encode(
            TokenKind.ACCESS,
            {"sub": user_id, "role": role, "fid": family_id, "jti": uuid4().hex},
            expires_in=self.config.access_expires,
        )
        refresh = self.provider.encode(
            TokenKind.REFRESH,
            {"sub": user_id, "fid": family_id, "jti": refresh_jti},
            expires_in=self.config.refresh_expires,
        )
        return TokenPair(
            access_token=access,
            refresh_token=refresh,
            expires_in=self.config.access_expires,
            user_id=user_id,
            family_id=family_id,
        )

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def verify_access(self, token: str) -> Identity:
        """
        Verify an access token and return the caller's identity.

        :raises TokenExpiredError: The token is past its ``exp``.
        :raises InvalidTokenError: Bad signature, malformed, wrong type, or
            the lineage has been revoked.
        """
        claims = self.provider.decode(TokenKind.ACCESS, token)
        family_id = claims.get("fid")
        role = claims.get("role")
        if not isinstance(family_id, str) or not isinstance(role, str):
            raise InvalidTokenError()
        if not self.store.is_family_active(family_id):
            raise InvalidTokenError("Session has been revoked.")
        return Identity(
            user_id=_subject(claims), role=role, family_id=family_id, jti=str(claims["jti"])
        )

    def decode_refresh(self, token: str) -> dict[str, Any]:
        claims = self.provider.decode(TokenKind.REFRESH, token)
        if not isinstance(claims.get("fid"), str):
            raise InvalidTokenError()
        _subject(claims)
        return claims

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, refresh_token: str, role_lookup: RoleLookup) -> TokenPair:
        """
        Consume ``refresh_token`` and issue the next pair of its lineage.

        :param refresh_token: Encoded refresh JWT.
        :param role_lookup: Returns the subject's current role, or ``None``
            when the account no longer exists.
        :raises TokenExpiredError: Token or session expired.
        :raises InvalidTokenError: Unknown session, revoked lineage, or
            deleted account.
        :raises TokenReusedError: The token was already rotated. The whole
            lineage is revoked before this is raised.
        """
        claims = self.decode_refresh(refresh_token)
        user_id = _subject(claims)
        family_id = str(claims["fid"])
        old_jti = str(claims["jti"])

        role = role_lookup(user_id)
        if role is None:
            raise InvalidTokenError()

        session = self.store.get(old_jti)
        if session is None or session.user_id != user_id or session.family_id != family_id:
            raise InvalidTokenError()

        new_jti = self.store.new_jti()
        now = self.now_utc()
        result = self.store.rotate(
            old_jti=old_jti,
            new_jti=new_jti,
            now=now,
            new_expires_at=now + timedelta(seconds=self.config.refresh_expires),
        )

        if result is RotationResult.OK:
            return self._sign_pair(
                user_id=user_id, role=role, family_id=family_id, refresh_jti=new_jti
            )
        if result is RotationResult.REUSED:
            revoked = self.store.revoke_family(family_id)
            logger.warning(
                "token.reuse_detected",
                extra={"user_id": user_id, "family_id": family_id, "action": f"revoked={revoked}"},
            )
            raise TokenReusedError(user_id=user_id, family_id=family_id)
        if result is RotationResult.EXPIRED:
            raise TokenExpiredError()
        raise InvalidTokenError()

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, refresh_token: str) -> str:
        """
        Revoke the lineage of ``refresh_token``.

        :returns: The revoked ``family_id``.
        """
        family_id = str(self.decode_refresh(refresh_token)["fid"])
        self.store.revoke_family(family_id)
        return family_id

    def revoke_family(self, family_id: str) -> int:
        return self.store.revoke_family(family_id)

    def revoke_all_for_user(self, user_id: int) -> int:
        return self.store.revoke_all_for_user(user_id)
