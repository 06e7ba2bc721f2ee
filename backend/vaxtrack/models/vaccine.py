"""Vaccine catalog and per-child vaccination records."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vaxtrack.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .child import Child
    from .drive import VaccineDrive


class Vaccine(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Catalog entry of the immunization schedule (read-shared, not owned).

    ``recommended_age_months`` and ``dose_number`` describe where the dose
    sits in the schedule, e.g. ``DTP`` dose 2 at 4 months.
    """

    __tablename__ = "vaccines"
    __repr_attrs__ = ("code",)

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    recommended_age_months: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dose_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("recommended_age_months >= 0", name="age_non_negative"),
        CheckConstraint("dose_number >= 1", name="dose_positive"),
    )


class VaccineRecord(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A dose administered to a child.

    Ownership is transitive: ``record -> child -> user``. There is no
    ``user_id`` column; scoped queries join through ``children``.
    """

    __tablename__ = "vaccine_records"
    __repr_attrs__ = ("child_id", "vaccine_id")

    child_id: Mapped[int] = mapped_column(
        ForeignKey("children.id", ondelete="CASCADE"), nullable=False
    )
    vaccine_id: Mapped[int] = mapped_column(
        ForeignKey("vaccines.id", ondelete="RESTRICT"), nullable=False
    )
    drive_id: Mapped[int | None] = mapped_column(
        ForeignKey("vaccine_drives.id", ondelete="SET NULL"), nullable=True
    )
    administered_on: Mapped[date] = mapped_column(Date, nullable=False)
    provider: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    child: Mapped[Child] = relationship("Child", back_populates="records")
    vaccine: Mapped[Vaccine] = relationship("Vaccine", lazy="joined")
    drive: Mapped[VaccineDrive | None] = relationship("VaccineDrive")

    __table_args__ = (
        Index("ix_vaccine_records_child_id", "child_id"),
        Index("ix_vaccine_records_vaccine_id", "vaccine_id"),
    )
