"""Relational refresh session store (default backend)."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from vaxtrack.models.refresh_session import RefreshSession
from vaxtrack.services._shared.ports import (
    RefreshSessionView,
    RefreshTokenStore,
    RotationResult,
    as_utc,
)
from vaxtrack.services._shared.retry import call_with_retry
from vaxtrack.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


def _view(row: RefreshSession) -> RefreshSessionView:
    return RefreshSessionView(
        jti=row.jti,
        user_id=int(row.user_id),
        family_id=row.family_id,
        issued_at=as_utc(row.issued_at),
        expires_at=as_utc(row.expires_at),
        used=row.used_at is not None,
        revoked=bool(row.revoked),
        replaced_by=row.replaced_by,
    )


class SqlRefreshTokenStore(RefreshTokenStore):
    """
    Refresh sessions in the ``refresh_sessions`` table.

    Rotation is a conditional ``UPDATE ... WHERE used_at IS NULL AND NOT
    revoked AND expires_at > now``: the database serializes concurrent
    attempts on the row, so exactly one sees ``rowcount == 1``. Every call
    runs in its own unit of work and is retried on transient errors.
    """

    def register(
        self,
        *,
        jti: str,
        user_id: int,
        family_id: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> None:
        def _insert() -> None:
            with SQLAlchemyUnitOfWork() as uow:
                uow.session.add(
                    RefreshSession(
                        jti=jti,
                        user_id=int(user_id),
                        family_id=family_id,
                        issued_at=issued_at,
                        expires_at=expires_at,
                        revoked=False,
                    )
                )

        call_with_retry(_insert)

    def rotate(
        self,
        *,
        old_jti: str,
        new_jti: str,
        now: datetime,
        new_expires_at: datetime,
    ) -> RotationResult:
        def _rotate() -> RotationResult:
            with SQLAlchemyUnitOfWork() as uow:
                session = uow.session
                owner = session.execute(
                    select(RefreshSession.user_id, RefreshSession.family_id).where(
                        RefreshSession.jti == old_jti
                    )
                ).first()
                if owner is None:
                    return RotationResult.NOT_FOUND

                claimed = session.execute(
                    update(RefreshSession)
                    .where(
                        RefreshSession.jti == old_jti,
                        RefreshSession.used_at.is_(None),
                        RefreshSession.revoked.is_(False),
                        RefreshSession.expires_at > now,
                    )
                    .values(used_at=now, replaced_by=new_jti)
                    .execution_options(synchronize_session=False)
                )
                if claimed.rowcount != 1:
                    return self._classify(session, old_jti, new_jti)

                session.add(
                    RefreshSession(
                        jti=new_jti,
                        user_id=owner.user_id,
                        family_id=owner.family_id,
                        issued_at=now,
                        expires_at=new_expires_at,
                        revoked=False,
                    )
                )
                return RotationResult.OK

        return call_with_retry(_rotate)

    @staticmethod
    def _classify(session: Session, jti: str, new_jti: str) -> RotationResult:
        """
        Explain why the conditional UPDATE matched nothing.

        ``replaced_by == new_jti`` means an earlier attempt of this same call
        committed and only its acknowledgement was lost, so it is ``OK``.
        """
        row = session.execute(
            select(
                RefreshSession.used_at, RefreshSession.revoked, RefreshSession.replaced_by
            ).where(RefreshSession.jti == jti)
        ).first()
        if row is None:
            return RotationResult.NOT_FOUND
        if row.revoked:
            return RotationResult.REVOKED
        if row.replaced_by == new_jti:
            return RotationResult.OK
        if row.used_at is not None:
            return RotationResult.REUSED
        return RotationResult.EXPIRED

    def get(self, jti: str) -> RefreshSessionView | None:
        def _get() -> RefreshSessionView | None:
            with SQLAlchemyUnitOfWork() as uow:
                row = uow.session.get(RefreshSession, jti)
                return _view(row) if row is not None else None

        return call_with_retry(_get)

    def _revoke_where(self, *criteria) -> int:
        def _revoke() -> int:
            with SQLAlchemyUnitOfWork() as uow:
                result = uow.session.execute(
                    update(RefreshSession)
                    .where(RefreshSession.revoked.is_(False), *criteria)
                    .values(revoked=True)
                    .execution_options(synchronize_session=False)
                )
                return int(result.rowcount or 0)

        return call_with_retry(_revoke)

    def revoke_family(self, family_id: str) -> int:
        return self._revoke_where(RefreshSession.family_id == family_id)

    def revoke_all_for_user(self, user_id: int) -> int:
        return self._revoke_where(RefreshSession.user_id == int(user_id))

    def is_family_active(self, family_id: str) -> bool:
        def _check() -> bool:
            with SQLAlchemyUnitOfWork() as uow:
                stmt = select(
                    exists().where(
                        RefreshSession.family_id == family_id,
                        RefreshSession.revoked.is_(False),
                    )
                )
                return bool(uow.session.execute(stmt).scalar())

        return call_with_retry(_check)
