from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from vaxtrack.services._shared.errors import InvalidTokenError, TokenExpiredError
from vaxtrack.services._shared.ports import TokenKind, TokenProvider

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "jti", "type", "iat", "exp", "iss")


@dataclass(frozen=True, slots=True)
class PyJWTTokenProvider(TokenProvider):
    """
    PyJWT adapter signing each token kind with its own secret.

    An access token presented as a refresh token (or the reverse) fails the
    signature check before its ``type`` claim is even read.

    :param access_secret: Key for access tokens.
    :param refresh_secret: Key for refresh tokens.
    :param algorithm: HMAC algorithm (``HS256``).
    :param issuer: Value of the ``iss`` claim, verified on decode.
    :param leeway: Clock skew tolerance in seconds.
    """

    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    issuer: str = "vaxtrack"
    leeway: int = 0

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> PyJWTTokenProvider:
        return cls(
            access_secret=config["JWT_SECRET_KEY"],
            refresh_secret=config["JWT_REFRESH_SECRET_KEY"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "vaxtrack"),
        )

    def _secret(self, kind: TokenKind) -> str:
        return self.access_secret if kind is TokenKind.ACCESS else self.refresh_secret

    def encode(self, kind: TokenKind, claims: dict[str, Any], *, expires_in: int) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "type": kind.value,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
        }
        if "sub" in payload:
            payload["sub"] = str(payload["sub"])
        return jwt.encode(payload, self._secret(kind), algorithm=self.algorithm)

    def decode(self, kind: TokenKind, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.algorithm],
                issuer=self.issuer,
                leeway=self.leeway,
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            logger.info("token.decode_failed", extra={"action": type(exc).__name__})
            raise InvalidTokenError() from exc

        if claims.get("type") != kind.value:
            raise InvalidTokenError("Wrong token type.")
        return claims
