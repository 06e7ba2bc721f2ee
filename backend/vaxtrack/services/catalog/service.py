"""Shared catalogs: vaccines (read-only) and vaccination drives."""

from __future__ import annotations

import logging

from vaxtrack.models.drive import VaccineDrive
from vaxtrack.models.vaccine import Vaccine
from vaxtrack.services._shared.base import BaseService
from vaxtrack.services._shared.dto import PageMeta, PaginationIn
from vaxtrack.services._shared.errors import DomainValidationError, NotFoundError
from vaxtrack.services._shared.policies.access import ensure_admin
from vaxtrack.services.catalog.dto import DriveIn, DriveOut, VaccineOut

logger = logging.getLogger(__name__)


def to_vaccine_out(v: Vaccine) -> VaccineOut:
    return VaccineOut(
        id=v.id,
        code=v.code,
        name=v.name,
        recommended_age_months=v.recommended_age_months,
        dose_number=v.dose_number,
        description=v.description,
    )


def to_drive_out(d: VaccineDrive) -> DriveOut:
    return DriveOut(
        id=d.id,
        name=d.name,
        region=d.region,
        location=d.location,
        starts_on=d.starts_on,
        ends_on=d.ends_on,
        description=d.description,
    )


class CatalogService(BaseService):
    """Catalog reads for any authenticated caller; drive creation for admins."""

    def list_vaccines(self) -> list[VaccineOut]:
        with self.ro_uow() as uow:
            rows = uow.vaccines.list(sort=["recommended_age_months", "code"])
            return [to_vaccine_out(v) for v in rows]

    def list_drives(
        self, page_in: PaginationIn, *, region: str | None = None
    ) -> tuple[list[DriveOut], PageMeta]:
        pagination = self.ensure_pagination(
            page=page_in.page, limit=page_in.limit, sort=page_in.sort or ["-starts_on"]
        )
        filters = {"region": region} if region else None
        with self.ro_uow() as uow:
            page = uow.drives.paginate(pagination, filters=filters)
            items = [to_drive_out(d) for d in page.items]
        return items, PageMeta.build(page=page.page, limit=page.limit, total=page.total)

    def get_drive(self, drive_id: int) -> DriveOut:
        with self.ro_uow() as uow:
            drive = uow.drives.get(drive_id)
            if drive is None:
                raise NotFoundError("VaccineDrive", drive_id)
            return to_drive_out(drive)

    def create_drive(self, dto: DriveIn) -> DriveOut:
        """
        Create a campaign.

        :raises NotFoundError: The caller lacks the admin capability.
        :raises DomainValidationError: ``ends_on`` precedes ``starts_on``.
        """
        ensure_admin(self.identity, entity="VaccineDrive")
        if dto.ends_on < dto.starts_on:
            raise DomainValidationError("End date precedes start date.", field="ends_on")
        with self.rw_uow() as uow:
            drive = uow.drives.add(
                VaccineDrive(
                    name=dto.name,
                    region=dto.region,
                    location=dto.location,
                    starts_on=dto.starts_on,
                    ends_on=dto.ends_on,
                    description=dto.description,
                )
            )
            out = to_drive_out(drive)
        logger.info("drive.created", extra={"user_id": self.identity.user_id})
        return out
