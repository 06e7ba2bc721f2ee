from __future__ import annotations

from enum import Enum
from typing import Any, Protocol


class TokenKind(str, Enum):
    """Token types; each kind is signed with its own secret."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenProvider(Protocol):
    """
    Port for signing and decoding JWTs.

    ``encode`` stamps ``type``, ``iat`` and ``exp``; ``decode`` verifies the
    signature with the key of the expected kind, checks expiry and issuer,
    and rejects a token whose ``type`` claim does not match.
    Implementations raise :class:`InvalidTokenError` or
    :class:`TokenExpiredError` and nothing else.
    """

    def encode(self, kind: TokenKind, claims: dict[str, Any], *, expires_in: int) -> str: ...

    def decode(self, kind: TokenKind, token: str) -> dict[str, Any]: ...
