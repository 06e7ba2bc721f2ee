from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class AuditEntryOut:
    id: int
    occurred_at: datetime
    actor_id: int | None
    action: str
    outcome: str
    target: str | None
    ip: str | None
    request_id: str | None
    detail: dict[str, Any] | None
