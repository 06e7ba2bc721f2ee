"""
Ports (hexagonal interfaces) for token handling and auditing.

Concrete adapters live under :mod:`vaxtrack.infra`:

- :class:`TokenProvider`: JWT signing/decoding (PyJWT adapter).
- :class:`RefreshTokenStore`: refresh session state with atomic rotation
  (SQL, Redis and in-memory adapters).
- :class:`AuditSink`: append-only audit trail (SQL adapter).
"""

from __future__ import annotations

from .audit_sink import AuditEvent, AuditSink, InMemoryAuditSink
from .refresh_token_store import (
    InMemoryRefreshTokenStore,
    RefreshSessionView,
    RefreshTokenStore,
    RotationResult,
    as_utc,
)
from .token_provider import TokenKind, TokenProvider

__all__ = [
    "AuditEvent",
    "AuditSink",
    "InMemoryAuditSink",
    "InMemoryRefreshTokenStore",
    "RefreshSessionView",
    "RefreshTokenStore",
    "RotationResult",
    "TokenKind",
    "TokenProvider",
    "as_utc",
]
