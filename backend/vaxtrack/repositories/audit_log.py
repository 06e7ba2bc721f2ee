"""Audit log repository: insert and read only."""

from __future__ import annotations

from vaxtrack.models.audit_log import AuditLogEntry
from vaxtrack.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLogEntry]):
    model = AuditLogEntry

    def _sortable_fields(self):
        return {"id": AuditLogEntry.id, "occurred_at": AuditLogEntry.occurred_at}

    def _filterable_fields(self):
        return {
            "actor_id": AuditLogEntry.actor_id,
            "action": AuditLogEntry.action,
            "outcome": AuditLogEntry.outcome,
        }

    def delete(self, instance: AuditLogEntry) -> None:
        raise PermissionError("Audit log entries cannot be deleted.")
