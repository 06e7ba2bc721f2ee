"""Row-level isolation for user-owned aggregates.

Every read and write of user-owned rows goes through an
:class:`OwnerScopedRepository`, which folds the caller's :class:`AccessScope`
into the base ``SELECT``. A row outside the scope is indistinguishable from
a missing one.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import Select
from sqlalchemy.orm import InstrumentedAttribute, Session

from vaxtrack.repositories.base import BaseRepository, E
from vaxtrack.services._shared.errors import NotFoundError

ADMIN_ROLE = "admin"


class _HasIdentity(Protocol):
    user_id: int
    role: str


@dataclass(frozen=True, slots=True)
class AccessScope:
    """
    Visibility granted to one authenticated caller.

    :param user_id: Owner id every scoped query is filtered on.
    :param is_admin: Explicit capability lifting the owner filter. Only
        identities whose verified token carries ``role=admin`` get it.
    """

    user_id: int
    is_admin: bool = False

    @classmethod
    def of(cls, identity: _HasIdentity) -> AccessScope:
        return cls(user_id=int(identity.user_id), is_admin=identity.role == ADMIN_ROLE)

    def owns(self, owner_id: int | None) -> bool:
        return self.is_admin or (owner_id is not None and int(owner_id) == self.user_id)


class OwnerScopedRepository(BaseRepository[E]):
    """
    Repository whose every query is constrained to the caller's rows.

    Subclasses implement :meth:`_owner_column` and, when ownership is
    transitive, :meth:`_join_owner` to reach the table holding it.
    """

    #: Entity name used in :class:`NotFoundError` (never the owner or id).
    entity_name: str = "Resource"

    def __init__(self, session: Session | None = None, *, scope: AccessScope) -> None:
        if not isinstance(scope, AccessScope):
            raise TypeError("OwnerScopedRepository requires an AccessScope.")
        super().__init__(session)
        self.scope = scope

    def _owner_column(self) -> InstrumentedAttribute[Any]:
        raise NotImplementedError

    def _join_owner(self, stmt: Select[Any]) -> Select[Any]:
        return stmt

    def _base_select(self) -> Select[Any]:
        stmt = self._join_owner(super()._base_select())
        if self.scope.is_admin:
            return stmt
        return stmt.where(self._owner_column() == self.scope.user_id)

    # --------------------------- Scoped operations ---------------------------

    def require(self, entity_id: Any) -> E:
        """
        Return the visible entity with ``entity_id``.

        :raises NotFoundError: When the row does not exist or is not visible.
        """
        instance = self.get(entity_id)
        if instance is None:
            raise NotFoundError(self.entity_name, entity_id)
        return instance

    def update_owned(self, entity_id: Any, fields: Mapping[str, Any]) -> E:
        instance = self.require(entity_id)
        return self.assign_updates(instance, fields, strict=True, flush=True)

    def delete_owned(self, entity_id: Any) -> None:
        self.delete(self.require(entity_id))
