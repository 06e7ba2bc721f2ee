"""SQLAlchemy implementation of :class:`UnitOfWork` for Flask."""

from __future__ import annotations

import logging
from contextlib import suppress

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session

from vaxtrack.core.extensions import db
from vaxtrack.repositories import (
    AccessScope,
    AuditLogRepository,
    ChildRepository,
    ProfileRepository,
    UserRepository,
    VaccineDriveRepository,
    VaccineRecordRepository,
    VaccineRepository,
)
from vaxtrack.uow.base import UnitOfWork

logger = logging.getLogger(__name__)


class SQLAlchemyRepositoryContainer:
    """
    Repositories sharing one SQLAlchemy session.

    Shared catalogs are always available. User-owned repositories
    (``profiles``, ``children``, ``records``) exist only when the unit of work
    was opened with an :class:`AccessScope`; touching them otherwise raises.
    """

    def __init__(self, *, session: Session, scope: AccessScope | None = None) -> None:
        self.session = session
        self.scope = scope
        self.users = UserRepository(session=session)
        self.vaccines = VaccineRepository(session=session)
        self.drives = VaccineDriveRepository(session=session)
        self.audit_log = AuditLogRepository(session=session)
        self._profiles: ProfileRepository | None = None
        self._children: ChildRepository | None = None
        self._records: VaccineRecordRepository | None = None
        if scope is not None:
            self._profiles = ProfileRepository(session=session, scope=scope)
            self._children = ChildRepository(session=session, scope=scope)
            self._records = VaccineRecordRepository(session=session, scope=scope)

    def _scoped(self, repo, name: str):
        if repo is None:
            raise RuntimeError(f"'{name}' requires a unit of work opened with an AccessScope.")
        return repo

    @property
    def profiles(self) -> ProfileRepository:
        return self._scoped(self._profiles, "profiles")

    @property
    def children(self) -> ChildRepository:
        return self._scoped(self._children, "children")

    @property
    def records(self) -> VaccineRecordRepository:
        return self._scoped(self._records, "records")


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write UoW on the Flask-scoped session: commit on success, rollback on error."""

    def __init__(self, *, scope: AccessScope | None = None) -> None:
        super().__init__(session=db.session, scope=scope)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            try:
                self.commit()
            except Exception:
                self.rollback()
                raise
        else:
            self.rollback()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


# First keyword of statements the read-only guard rejects.
WRITE_VERBS = frozenset(
    {
        "insert",
        "update",
        "delete",
        "merge",
        "upsert",
        "replace",
        "create",
        "alter",
        "drop",
        "truncate",
        "grant",
        "revoke",
    }
)
READ_ONLY_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


def _reject_pending_flush(session: Session, flush_context, instances) -> None:
    if session.new or session.dirty or session.deleted:
        raise RuntimeError("Read-only UnitOfWork: ORM flush blocked.")


def _reject_write_statement(conn, cursor, statement, parameters, context, executemany) -> None:
    verb = (statement or "").lstrip().split(None, 1)[:1]
    if verb and verb[0].lower() in WRITE_VERBS:
        raise RuntimeError(f"Read-only UnitOfWork: SQL statement blocked: {verb[0].upper()}")


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Query-only unit of work.

    While the block runs, flushing pending ORM changes and executing DML or
    DDL raise ``RuntimeError``. If the session had no transaction yet, this
    unit of work starts one, marks it ``READ ONLY`` on PostgreSQL and MySQL
    (plus the isolation hint) and rolls it back on exit. Inside an already
    running transaction only the guards apply.

    :param isolation_level: Applied only when this unit of work owns the
        transaction on a non-SQLite backend.
    """

    def __init__(
        self,
        *,
        scope: AccessScope | None = None,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session, scope=scope)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owns_transaction = False
        self._guarded: Connection | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        # scoped_session does not proxy in_transaction()
        self._owns_transaction = not self.session().in_transaction()
        if self._owns_transaction:
            self.session.begin()

        conn = self.session.connection()
        event.listen(self.session, "before_flush", _reject_pending_flush)
        event.listen(conn, "before_cursor_execute", _reject_write_statement)
        self._guarded = conn

        if self._owns_transaction and conn.dialect.name != "sqlite":
            self._apply_transaction_directives(conn.dialect.name)
        return self

    def _apply_transaction_directives(self, dialect: str) -> None:
        directives = []
        if self.isolation_level:
            directives.append(f"SET TRANSACTION ISOLATION LEVEL {self.isolation_level.upper()}")
        if self.enforce_db_readonly and dialect in READ_ONLY_DIALECTS:
            directives.append("SET TRANSACTION READ ONLY")
        try:
            for sql in directives:
                self.session.execute(text(sql))
        except SQLAlchemyError as exc:
            logger.warning("uow.read_only.directives_failed: %s", exc)

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owns_transaction:
                with suppress(SQLAlchemyError):
                    self.session.rollback()
        finally:
            with suppress(InvalidRequestError):
                event.remove(self.session, "before_flush", _reject_pending_flush)
            if self._guarded is not None:
                with suppress(InvalidRequestError):
                    event.remove(self._guarded, "before_cursor_execute", _reject_write_statement)
            self._guarded = None
            self._owns_transaction = False

    def commit(self) -> None:
        raise RuntimeError("Read-only UnitOfWork does not allow commit().")

    def rollback(self) -> None:
        self.session.rollback()
