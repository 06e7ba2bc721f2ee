"""Child model: a vaccination subject owned by exactly one user."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from vaxtrack.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User
    from .vaccine import VaccineRecord

SEX_VALUES = ("female", "male", "other", "unspecified")


class Child(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Child whose vaccinations are tracked.

    ``user_id`` is the ownership column every scoped query filters on.
    """

    __tablename__ = "children"
    __repr_attrs__ = ("first_name",)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(80), nullable=True)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    sex: Mapped[str] = mapped_column(String(16), nullable=False, default="unspecified")

    user: Mapped[User] = relationship("User", back_populates="children")
    records: Mapped[list[VaccineRecord]] = relationship(
        "VaccineRecord",
        back_populates="child",
        cascade="all, delete-orphan",
        order_by="VaccineRecord.administered_on",
    )

    __table_args__ = (
        CheckConstraint(
            "sex IN ('female', 'male', 'other', 'unspecified')", name="sex_valid"
        ),
        Index("ix_children_user_id", "user_id"),
    )

    @validates("first_name")
    def _strip_first_name(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("First name is required.")
        return value.strip()

    @validates("sex")
    def _validate_sex(self, key: str, value: str) -> str:
        v = (value or "unspecified").strip().lower()
        if v not in SEX_VALUES:
            raise ValueError(f"Unknown sex value: {value!r}")
        return v
