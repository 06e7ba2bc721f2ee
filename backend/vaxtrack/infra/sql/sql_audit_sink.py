"""Audit sink writing to the append-only ``audit_log`` table."""

from __future__ import annotations

import logging

from vaxtrack.models.audit_log import AuditLogEntry
from vaxtrack.services._shared.ports import AuditEvent, AuditSink
from vaxtrack.services._shared.retry import call_with_retry
from vaxtrack.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


class SqlAuditSink(AuditSink):
    """
    Persist each event in its own transaction.

    Callers record failures *after* rolling back the failed work, so the
    audit row commits independently of the operation it describes.
    """

    def record(self, event: AuditEvent) -> None:
        def _insert() -> None:
            with SQLAlchemyUnitOfWork() as uow:
                uow.audit_log.add(
                    AuditLogEntry(
                        actor_id=event.actor_id,
                        action=event.action,
                        outcome=event.outcome,
                        target=event.target,
                        ip=event.ip,
                        request_id=event.request_id,
                        detail=dict(event.detail) or None,
                    )
                )

        call_with_retry(_insert)
        logger.info(
            "audit.%s",
            event.action,
            extra={"action": event.action, "outcome": event.outcome, "user_id": event.actor_id},
        )
