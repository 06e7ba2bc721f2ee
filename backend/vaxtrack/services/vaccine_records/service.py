"""Use cases over vaccine records, scoped through the owning child."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any

from vaxtrack.models.child import Child
from vaxtrack.models.vaccine import VaccineRecord
from vaxtrack.services._shared.base import BaseService
from vaxtrack.services._shared.dto import PageMeta, PaginationIn
from vaxtrack.services._shared.errors import DomainValidationError
from vaxtrack.services.vaccine_records.dto import VaccineRecordIn, VaccineRecordOut
from vaxtrack.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

logger = logging.getLogger(__name__)


def to_record_out(record: VaccineRecord) -> VaccineRecordOut:
    return VaccineRecordOut(
        id=record.id,
        child_id=record.child_id,
        vaccine_id=record.vaccine_id,
        vaccine_code=record.vaccine.code,
        vaccine_name=record.vaccine.name,
        administered_on=record.administered_on,
        drive_id=record.drive_id,
        provider=record.provider,
        notes=record.notes,
    )


class VaccineRecordService(BaseService):
    """
    CRUD over vaccine records.

    Creating or listing requires the child to be visible to the caller;
    single-record operations are scoped by the record repository's join.
    """

    def _validate_refs(
        self, uow: SQLAlchemyRepositoryContainer, child: Child, fields: Mapping[str, Any]
    ) -> None:
        vaccine_id = fields.get("vaccine_id")
        if vaccine_id is not None and uow.vaccines.get(vaccine_id) is None:
            raise DomainValidationError("Unknown vaccine.", field="vaccine_id")
        drive_id = fields.get("drive_id")
        if drive_id is not None and uow.drives.get(drive_id) is None:
            raise DomainValidationError("Unknown vaccination drive.", field="drive_id")
        administered_on = fields.get("administered_on")
        if administered_on is not None:
            if administered_on > date.today():
                raise DomainValidationError(
                    "Administration date cannot be in the future.", field="administered_on"
                )
            if administered_on < child.date_of_birth:
                raise DomainValidationError(
                    "Administration date precedes the date of birth.", field="administered_on"
                )

    def list_for_child(
        self, child_id: int, page_in: PaginationIn
    ) -> tuple[list[VaccineRecordOut], PageMeta]:
        pagination = self.ensure_pagination(
            page=page_in.page, limit=page_in.limit, sort=page_in.sort or ["administered_on"]
        )
        with self.ro_uow(scoped=True) as uow:
            uow.children.require(child_id)
            page = uow.records.paginate(pagination, filters={"child_id": child_id})
            items = [to_record_out(r) for r in page.items]
        return items, PageMeta.build(page=page.page, limit=page.limit, total=page.total)

    def create(self, child_id: int, dto: VaccineRecordIn) -> VaccineRecordOut:
        with self.rw_uow(scoped=True) as uow:
            child = uow.children.require(child_id)
            self._validate_refs(
                uow,
                child,
                {
                    "vaccine_id": dto.vaccine_id,
                    "drive_id": dto.drive_id,
                    "administered_on": dto.administered_on,
                },
            )
            record = VaccineRecord(
                child_id=child.id,
                vaccine_id=dto.vaccine_id,
                drive_id=dto.drive_id,
                administered_on=dto.administered_on,
                provider=dto.provider,
                notes=dto.notes,
            )
            uow.records.add(record)
            out = to_record_out(record)
        logger.info(
            "record.created",
            extra={"user_id": self.identity.user_id, "child_id": child_id, "record_id": out.id},
        )
        return out

    def get(self, record_id: int) -> VaccineRecordOut:
        with self.ro_uow(scoped=True) as uow:
            return to_record_out(uow.records.require(record_id))

    def update(self, record_id: int, fields: Mapping[str, Any]) -> VaccineRecordOut:
        with self.rw_uow(scoped=True) as uow:
            record = uow.records.require(record_id)
            self._validate_refs(uow, record.child, fields)
            uow.records.assign_updates(record, fields)
            uow.session.refresh(record)
            return to_record_out(record)

    def delete(self, record_id: int) -> None:
        with self.rw_uow(scoped=True) as uow:
            uow.records.delete_owned(record_id)
        logger.info(
            "record.deleted", extra={"user_id": self.identity.user_id, "record_id": record_id}
        )
