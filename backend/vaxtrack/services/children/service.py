"""Use cases over the caller's children."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from vaxtrack.models.child import Child
from vaxtrack.services._shared.base import BaseService
from vaxtrack.services._shared.dto import PageMeta, PaginationIn
from vaxtrack.services._shared.errors import DomainValidationError
from vaxtrack.services.children.dto import ChildIn, ChildOut

logger = logging.getLogger(__name__)


def to_child_out(child: Child) -> ChildOut:
    return ChildOut(
        id=child.id,
        first_name=child.first_name,
        last_name=child.last_name,
        date_of_birth=child.date_of_birth,
        sex=child.sex,
    )


def _check_birth_date(value: date) -> None:
    if value > date.today():
        raise DomainValidationError("Date of birth cannot be in the future.", field="date_of_birth")


class ChildService(BaseService):
    """
    CRUD over children, always through the caller's scope.

    Another user's child behaves exactly like a missing one (404).
    """

    def list(self, page_in: PaginationIn) -> tuple[list[ChildOut], PageMeta]:
        pagination = self.ensure_pagination(
            page=page_in.page, limit=page_in.limit, sort=page_in.sort
        )
        with self.ro_uow(scoped=True) as uow:
            page = uow.children.paginate(pagination)
            items = [to_child_out(c) for c in page.items]
        return items, PageMeta.build(page=page.page, limit=page.limit, total=page.total)

    def create(self, dto: ChildIn) -> ChildOut:
        _check_birth_date(dto.date_of_birth)
        with self.rw_uow(scoped=True) as uow:
            try:
                child = Child(
                    user_id=self.identity.user_id,
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    date_of_birth=dto.date_of_birth,
                    sex=dto.sex,
                )
            except ValueError as exc:
                raise DomainValidationError(str(exc)) from exc
            uow.children.add(child)
            out = to_child_out(child)
        logger.info("child.created", extra={"user_id": self.identity.user_id, "child_id": out.id})
        return out

    def get(self, child_id: int) -> ChildOut:
        with self.ro_uow(scoped=True) as uow:
            return to_child_out(uow.children.require(child_id))

    def update(self, child_id: int, fields: Mapping[str, Any]) -> ChildOut:
        if "date_of_birth" in fields:
            _check_birth_date(fields["date_of_birth"])
        with self.rw_uow(scoped=True) as uow:
            try:
                child = uow.children.update_owned(child_id, fields)
            except ValueError as exc:
                raise DomainValidationError(str(exc)) from exc
            return to_child_out(child)

    def delete(self, child_id: int) -> None:
        with self.rw_uow(scoped=True) as uow:
            uow.children.delete_owned(child_id)
        logger.info("child.deleted", extra={"user_id": self.identity.user_id, "child_id": child_id})
