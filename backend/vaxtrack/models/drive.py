"""Vaccination campaigns ("drives"), shared read-only with every user."""

from __future__ import annotations

from datetime import date

from sqlalchemy import CheckConstraint, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from vaxtrack.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin


class VaccineDrive(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Public vaccination campaign; created by administrators only."""

    __tablename__ = "vaccine_drives"
    __repr_attrs__ = ("name", "region")

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    region: Mapped[str | None] = mapped_column(String(120), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    starts_on: Mapped[date] = mapped_column(Date, nullable=False)
    ends_on: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (CheckConstraint("ends_on >= starts_on", name="date_range"),)
