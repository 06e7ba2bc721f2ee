"""
Service-layer failures, free of any Flask or HTTP import.

:func:`vaxtrack.services._shared.base.translate_exceptions` maps each class
to its problem+json status; the mapping is the only place HTTP appears.
"""

from __future__ import annotations

from dataclasses import dataclass


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """Root of every error a service may raise on purpose."""


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Base class for failures that must surface as HTTP 401."""

    default_message = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidCredentialsError(AuthenticationError):
    """Email/password pair did not match a stored identity."""

    default_message = "Invalid credentials."


class InvalidTokenError(AuthenticationError):
    """Token is malformed, forged, of the wrong type, or its lineage is revoked."""

    default_message = "Invalid token."


class TokenExpiredError(AuthenticationError):
    """Token signature is valid but its ``exp`` has lapsed."""

    default_message = "Token has expired."


class TokenReusedError(AuthenticationError):
    """An already-rotated refresh token was presented again."""

    default_message = "Refresh token reuse detected. Please sign in again."

    def __init__(
        self,
        message: str | None = None,
        *,
        user_id: int | None = None,
        family_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.user_id = user_id
        self.family_id = family_id


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when an entity is missing **or not visible** to the caller.

    Cross-tenant access raises this error as well, so callers can never
    distinguish "exists but belongs to someone else" from "does not exist".

    :param entity: Entity name (e.g., "Child").
    :type entity: str
    :param key: Identifier or search key (never echoed to clients).
    :type key: str | int
    """

    entity: str
    key: str | int

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.entity} not found"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :type entity: str
    :param detail: Short human-readable explanation.
    :type detail: str
    """

    entity: str
    detail: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Conflict on {self.entity}: {self.detail}"


class DomainValidationError(ServiceError):
    """Input passed schema validation but violates a domain rule."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class InternalError(ServiceError):
    """A backing store failed repeatedly; details stay server-side."""

    def __init__(self, message: str = "Internal error.") -> None:
        super().__init__(message)
