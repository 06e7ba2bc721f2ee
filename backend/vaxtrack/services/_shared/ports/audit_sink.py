from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """
    One security-relevant event.

    :param action: Dotted event name, e.g. ``auth.login``.
    :param outcome: ``success`` or ``failure``.
    :param actor_id: Acting user, when known.
    :param target: Affected object, e.g. ``refresh_family:<id>``.
    :param ip: Client address.
    :param request_id: Correlation id of the originating request.
    :param detail: Extra non-secret context (never tokens or passwords).
    """

    action: str
    outcome: str
    actor_id: int | None = None
    target: str | None = None
    ip: str | None = None
    request_id: str | None = None
    detail: dict[str, Any] = field(default_factory=dict)


class AuditSink(Protocol):
    """Append-only destination for :class:`AuditEvent` records."""

    def record(self, event: AuditEvent) -> None: ...


class InMemoryAuditSink(AuditSink):
    """Collects events in a list; used by unit tests."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    def actions(self) -> list[tuple[str, str]]:
        return [(e.action, e.outcome) for e in self.events]
