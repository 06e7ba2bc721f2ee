"""Unit tests for the SQL audit sink."""

from __future__ import annotations

from sqlalchemy import select

from tests.factories.user import UserFactory
from vaxtrack.infra.sql.sql_audit_sink import SqlAuditSink
from vaxtrack.models import AuditLogEntry
from vaxtrack.services._shared.ports import AuditEvent


def test_record_persists_event(session):
    SqlAuditSink().record(
        AuditEvent(
            action="auth.login",
            outcome="failure",
            ip="198.51.100.4",
            request_id="req-9",
            detail={"email": "who@example.com"},
        )
    )

    row = session.scalars(select(AuditLogEntry)).one()
    assert row.actor_id is None
    assert row.detail == {"email": "who@example.com"}
    assert row.occurred_at is not None


def test_entries_outlive_their_actor(session):
    user = UserFactory()
    session.commit()
    user_id = user.id
    SqlAuditSink().record(AuditEvent(action="account.delete", outcome="success", actor_id=user_id))

    session.delete(user)
    session.commit()

    row = session.scalars(select(AuditLogEntry)).one()
    assert row.actor_id == user_id
