from __future__ import annotations

from vaxtrack.models.audit_log import AuditLogEntry
from vaxtrack.services._shared.base import BaseService
from vaxtrack.services._shared.dto import PageMeta, PaginationIn
from vaxtrack.services._shared.policies.access import ensure_admin
from vaxtrack.services.audit.dto import AuditEntryOut


def to_entry_out(e: AuditLogEntry) -> AuditEntryOut:
    return AuditEntryOut(
        id=e.id,
        occurred_at=e.occurred_at,
        actor_id=e.actor_id,
        action=e.action,
        outcome=e.outcome,
        target=e.target,
        ip=e.ip,
        request_id=e.request_id,
        detail=e.detail,
    )


class AuditService(BaseService):
    """Paginated read access to the audit trail (admin capability only)."""

    def list(
        self,
        page_in: PaginationIn,
        *,
        actor_id: int | None = None,
        action: str | None = None,
        outcome: str | None = None,
    ) -> tuple[list[AuditEntryOut], PageMeta]:
        ensure_admin(self.identity, entity="AuditLog")
        pagination = self.ensure_pagination(
            page=page_in.page, limit=page_in.limit, sort=page_in.sort or ["-occurred_at"]
        )
        filters = {
            k: v
            for k, v in {"actor_id": actor_id, "action": action, "outcome": outcome}.items()
            if v is not None
        }
        with self.ro_uow() as uow:
            page = uow.audit_log.paginate(pagination, filters=filters)
            items = [to_entry_out(e) for e in page.items]
        return items, PageMeta.build(page=page.page, limit=page.limit, total=page.total)
