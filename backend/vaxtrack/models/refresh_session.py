"""Server-side state of issued refresh tokens."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vaxtrack.core.extensions import db

from .base import ReprMixin


class RefreshSession(ReprMixin, db.Model):
    """
    One issued refresh token, keyed by its ``jti``.

    Tokens descending from the same login share a ``family_id``. A session is
    *active* while ``used_at`` is NULL, ``revoked`` is false and
    ``expires_at`` lies in the future. Rotation marks ``used_at`` and links the
    successor through ``replaced_by``.
    """

    __tablename__ = "refresh_sessions"
    __repr_attrs__ = ("user_id", "family_id", "revoked")

    jti: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    family_id: Mapped[str] = mapped_column(String(64), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    replaced_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_refresh_sessions_user_id", "user_id"),
        Index("ix_refresh_sessions_family_id", "family_id"),
    )

    def __repr__(self) -> str:
        return f"<RefreshSession jti={self.jti} family={self.family_id}>"
