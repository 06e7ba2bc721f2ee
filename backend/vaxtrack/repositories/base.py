"""Common repository machinery on top of SQLAlchemy 2.x selects.

A repository never commits: the unit of work that handed it a session decides
when to commit or roll back. Callers can only sort, filter and update through
the per-repository whitelists declared by the hook methods.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import InstrumentedAttribute, Session

from vaxtrack.core.extensions import db

E = TypeVar("E")


@dataclass(slots=True)
class Pagination:
    """Requested page (1-based), page size and ``[-]field`` sort tokens."""

    page: int
    limit: int
    sort: list[str]

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * max(self.limit, 1)


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int


def paginate_select(
    session: Session, stmt: Select[Any], *, page: int, limit: int
) -> tuple[list[Any], int]:
    """
    Run ``stmt`` for a single page.

    ``page`` and ``limit`` are clamped to at least 1. The total is counted on
    the unordered statement wrapped as a subquery, so joins and owner filters
    already applied to ``stmt`` are respected.

    :returns: ``(rows, total_matching_rows)``
    """
    window = Pagination(page=int(page), limit=max(int(limit), 1), sort=[])
    counted = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = session.execute(counted).scalar_one()
    rows = session.scalars(stmt.limit(window.limit).offset(window.offset)).all()
    return list(rows), int(total)


class BaseRepository(Generic[E]):
    """
    Data access for one mapped class.

    Subclasses set :attr:`model` and override the whitelist hooks they need.
    :meth:`_base_select` is the only place a ``SELECT`` is started, which lets
    :class:`~vaxtrack.repositories.scoped.OwnerScopedRepository` add its owner
    predicate once for every read.
    """

    model: type[E]

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session if self._session is not None else cast(Session, db.session)

    # Hooks

    def _base_select(self) -> Select[Any]:
        return select(self.model)

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {}

    def _updatable_fields(self) -> set[str]:
        return set()

    # Query building

    def _filtered(self, filters: Mapping[str, Any] | None) -> Select[Any]:
        """Base select narrowed by equality on whitelisted keys; other keys are dropped."""
        stmt = self._base_select()
        columns = self._filterable_fields()
        for key, value in (filters or {}).items():
            if key in columns:
                stmt = stmt.where(columns[key] == value)
        return stmt

    def _ordered(self, stmt: Select[Any], tokens: Iterable[str]) -> Select[Any]:
        """
        Order by whitelisted ``field`` / ``-field`` tokens.

        Unknown fields are skipped. ``id`` always closes the ordering so that
        page boundaries are stable between requests.
        """
        columns = self._sortable_fields()
        for token in tokens:
            name = token.strip().lstrip("-")
            column = columns.get(name)
            if column is not None:
                stmt = stmt.order_by(column.desc() if token.strip().startswith("-") else column)
        pk = getattr(self.model, "id", None)
        return stmt.order_by(pk) if pk is not None else stmt

    # Writes

    def add(self, instance: E) -> E:
        """Add and flush, so generated keys are available to the caller."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def assign_updates(
        self,
        instance: E,
        fields: Mapping[str, Any],
        *,
        strict: bool = True,
        flush: bool = True,
    ) -> E:
        """
        ``setattr`` each whitelisted field so model validators run.

        :raises ValueError: In ``strict`` mode, when any key is outside
            :meth:`_updatable_fields`.
        """
        allowed = self._updatable_fields()
        rejected = sorted(set(fields) - allowed)
        if rejected and strict:
            raise ValueError(f"Fields not updatable on {type(self).__name__}: {rejected}")
        for key in fields.keys() & allowed:
            setattr(instance, key, fields[key])
        if flush:
            self.session.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        return self.assign_updates(instance, fields)

    # Reads

    def get(self, entity_id: Any) -> E | None:
        """Fetch by ``id`` through :meth:`_base_select`, so scoping applies."""
        stmt = self._base_select().where(self.model.id == entity_id)  # type: ignore[attr-defined]
        return self.session.scalars(stmt).first()

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] = (),
        limit: int | None = None,
    ) -> list[E]:
        stmt = self._ordered(self._filtered(filters), sort)
        if limit is not None:
            stmt = stmt.limit(int(limit))
        return list(self.session.scalars(stmt).all())

    def paginate(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[E]:
        stmt = self._ordered(self._filtered(filters), pagination.sort)
        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)
