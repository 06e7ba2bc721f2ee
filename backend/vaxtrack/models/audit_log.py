"""Append-only audit trail of security-relevant events."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Index, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column

from vaxtrack.core.extensions import db

from .base import PKMixin, ReprMixin

OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLogEntry(PKMixin, ReprMixin, db.Model):
    """
    Immutable audit event.

    ``actor_id`` is deliberately not a foreign key: entries outlive the
    accounts they describe (e.g. ``account.delete``).
    """

    __tablename__ = "audit_log"
    __repr_attrs__ = ("action", "outcome")

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    actor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    action: Mapped[str] = mapped_column(String(64), nullable=False)
    outcome: Mapped[str] = mapped_column(String(16), nullable=False)
    target: Mapped[str | None] = mapped_column(String(128), nullable=True)
    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)
    request_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    detail: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    __table_args__ = (
        Index("ix_audit_log_occurred_at", "occurred_at"),
        Index("ix_audit_log_actor_id", "actor_id"),
        Index("ix_audit_log_action", "action"),
    )


@event.listens_for(AuditLogEntry, "before_update")
def _reject_update(mapper, connection, target) -> None:  # noqa: ANN001
    raise PermissionError("Audit log entries are immutable.")


@event.listens_for(AuditLogEntry, "before_delete")
def _reject_delete(mapper, connection, target) -> None:  # noqa: ANN001
    raise PermissionError("Audit log entries cannot be deleted.")
