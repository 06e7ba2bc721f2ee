from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token lifetimes, built once from the Flask config.

    :param access_expires: Access token lifetime in seconds.
    :type access_expires: int
    :param refresh_expires: Refresh token lifetime in seconds.
    :type refresh_expires: int
    """

    access_expires: int = 24 * 3600
    refresh_expires: int = 7 * 24 * 3600

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> AuthTokenConfig:
        return cls(
            access_expires=int(config["JWT_ACCESS_TOKEN_EXPIRES_SECONDS"]),
            refresh_expires=int(config["JWT_REFRESH_TOKEN_EXPIRES_SECONDS"]),
        )


@dataclass(frozen=True, slots=True)
class TokenPair:
    """
    Access/refresh pair handed to the client.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param expires_in: Access token lifetime in seconds.
    :param user_id: Subject of both tokens.
    :param family_id: Lineage shared by the pair (kept server-side).
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user_id: int
    family_id: str
    token_type: str = "Bearer"
