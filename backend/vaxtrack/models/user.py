"""User model: the authentication identity (credential store)."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from flask import current_app, has_app_context
from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates
from werkzeug.security import check_password_hash, generate_password_hash

from vaxtrack.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .child import Child
    from .profile import Profile

DEFAULT_HASH_METHOD = "scrypt"


class Role(str, Enum):
    """Roles carried in the access token ``role`` claim."""

    PARENT = "parent"
    ADMIN = "admin"


def _hash_method() -> str:
    if has_app_context():
        return str(current_app.config.get("PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD))
    return DEFAULT_HASH_METHOD


_DECOY_HASHES: dict[str, str] = {}


def check_against_decoy(raw: str) -> None:
    """Run one hash comparison for an account that does not exist."""
    method = _hash_method()
    decoy = _DECOY_HASHES.get(method)
    if decoy is None:
        decoy = _DECOY_HASHES[method] = generate_password_hash(uuid4().hex, method=method)
    check_password_hash(decoy, raw)


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Authentication identity for a parent/guardian or an administrator.

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        Hashed password (write-only setter via ``password``).
    role : str
        One of :class:`Role`. Only ``admin`` unlocks catalog writes and the
        audit log.
    full_name : str | None
        Optional display name.

    Deleting a user cascades to the profile, children (and their vaccine
    records) and refresh sessions.
    """

    __tablename__ = "users"
    __repr_attrs__ = ("email", "role")

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=Role.PARENT.value)
    full_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    profile: Mapped[Profile | None] = relationship(
        "Profile",
        uselist=False,
        back_populates="user",
        cascade="all, delete-orphan",
    )
    children: Mapped[list[Child]] = relationship(
        "Child",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    refresh_sessions = relationship(
        "RefreshSession",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint("role IN ('parent', 'admin')", name="role_valid"),
        Index("ix_users_email", "email"),
    )

    # Credentials

    @property
    def password(self) -> Any:  # pragma: no cover
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw, method=_hash_method())

    def verify_password(self, raw: str) -> bool:
        """Constant-time check of ``raw`` against the stored hash."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    # Validation

    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """Lowercase and trim; deeper format checks belong to the request schema."""
        email = value.strip().lower() if isinstance(value, str) else ""
        local, _, domain = email.partition("@")
        if not local or "." not in domain:
            raise ValueError("Email format looks invalid.")
        return email

    @validates("role")
    def _validate_role(self, key: str, value: str | Role) -> str:
        role = Role(value).value if value in {r.value for r in Role} else None
        if role is None:
            raise ValueError(f"Unknown role: {value!r}")
        return role
