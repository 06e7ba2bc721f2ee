from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for account registration.

    :param email: Login email (normalized by the model).
    :type email: str
    :param password: Raw password; hashed before it is stored.
    :type password: str
    :param full_name: Optional display name.
    :type full_name: str | None
    """

    email: str
    password: str
    full_name: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Input DTO for logout.

    The lineage of the access token used to call logout is always revoked.

    :param refresh_token: Optional refresh token whose lineage is revoked too.
    :type refresh_token: str | None
    :param all_sessions: Revoke every lineage of the caller.
    :type all_sessions: bool
    """

    refresh_token: str | None = None
    all_sessions: bool = False


# ---------------------------- Output DTOs --------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public view of an account (never includes the password hash)."""

    id: int
    email: str
    role: str
    full_name: str | None
    created_at: datetime | None
