"""Idempotent database seed helpers for local development environments."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, TypeVar, cast

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import select
from sqlalchemy.orm import Session

from vaxtrack.models.child import Child
from vaxtrack.models.drive import VaccineDrive
from vaxtrack.models.user import Role, User
from vaxtrack.models.vaccine import Vaccine, VaccineRecord

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

VACCINE_FIELDS = ("code", "name", "recommended_age_months", "dose_number")

# Childhood immunization schedule; codes are stored uppercase.
VACCINE_FIXTURES: list[tuple[str, str, int, int]] = [
    ("BCG", "Bacillus Calmette-Guerin", 0, 1),
    ("HEPB-1", "Hepatitis B", 0, 1),
    ("OPV-0", "Oral polio (birth dose)", 0, 1),
    ("HEPB-2", "Hepatitis B", 1, 2),
    ("DTP-1", "Diphtheria, tetanus, pertussis", 2, 1),
    ("HIB-1", "Haemophilus influenzae type b", 2, 1),
    ("PCV-1", "Pneumococcal conjugate", 2, 1),
    ("ROTA-1", "Rotavirus", 2, 1),
    ("DTP-2", "Diphtheria, tetanus, pertussis", 4, 2),
    ("HIB-2", "Haemophilus influenzae type b", 4, 2),
    ("PCV-2", "Pneumococcal conjugate", 4, 2),
    ("ROTA-2", "Rotavirus", 4, 2),
    ("DTP-3", "Diphtheria, tetanus, pertussis", 6, 3),
    ("HEPB-3", "Hepatitis B", 6, 3),
    ("MMR-1", "Measles, mumps, rubella", 12, 1),
    ("VAR-1", "Varicella", 12, 1),
    ("MMR-2", "Measles, mumps, rubella", 48, 2),
]

DRIVE_FIXTURES: list[dict[str, Any]] = [
    {
        "name": "Spring measles catch-up",
        "region": "North",
        "location": "Central community clinic",
        "starts_on": date(2026, 3, 1),
        "ends_on": date(2026, 3, 31),
        "description": "MMR catch-up doses for children aged 1-5.",
    },
    {
        "name": "Polio immunization day",
        "region": "South",
        "location": "Riverside school",
        "starts_on": date(2026, 10, 24),
        "ends_on": date(2026, 10, 24),
        "description": None,
    },
]

USER_FIXTURES: list[dict[str, str]] = [
    {
        "email": "admin@example.com",
        "full_name": "Clinic Admin",
        "password": "adminPass123!",
        "role": Role.ADMIN.value,
    },
    {
        "email": "dana.parent@example.com",
        "full_name": "Dana Parent",
        "password": "parentPass123",
        "role": Role.PARENT.value,
    },
]

CHILD_FIXTURES: list[dict[str, Any]] = [
    {
        "user_email": "dana.parent@example.com",
        "first_name": "Robin",
        "last_name": "Parent",
        "date_of_birth": date(2025, 6, 15),
        "sex": "unspecified",
        "records": [("BCG", date(2025, 6, 16)), ("HEPB-1", date(2025, 6, 16))],
    },
]


def _session(database: SQLAlchemy) -> Session:
    """Return the current SQLAlchemy session."""
    return cast(Session, database.session)


def _touch(summary: dict[str, dict[str, int]], table: str, created: bool) -> None:
    """Update summary counters for the given table."""
    entry = summary.setdefault(table, {"created": 0, "existing": 0})
    if created:
        entry["created"] += 1
    else:
        entry["existing"] += 1


def _get_or_create(
    session: Session,
    model: type[T],
    *,
    defaults: dict[str, Any] | None = None,
    **filters: Any,
) -> tuple[T, bool]:
    """Fetch ``model`` by ``filters`` or create it using ``defaults``."""
    instance = session.execute(select(model).filter_by(**filters)).scalar_one_or_none()
    if instance is not None:
        return instance, False
    params = dict(defaults or {})
    params.update(filters)
    instance = cast(T, model(**params))
    session.add(instance)
    return instance, True


def seed_catalog(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create the vaccine schedule and sample vaccination drives."""
    if verbose:
        LOGGER.info("Seeding vaccine catalog and drives...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}

    for row in VACCINE_FIXTURES:
        fixture = dict(zip(VACCINE_FIELDS, row, strict=True))
        code = fixture.pop("code")
        _, created = _get_or_create(session, Vaccine, code=code, defaults=fixture)
        _touch(summary, "vaccines", created)

    for fixture in DRIVE_FIXTURES:
        defaults = {k: v for k, v in fixture.items() if k not in {"name", "starts_on"}}
        _, created = _get_or_create(
            session,
            VaccineDrive,
            name=fixture["name"],
            starts_on=fixture["starts_on"],
            defaults=defaults,
        )
        _touch(summary, "vaccine_drives", created)

    session.commit()
    return summary


def seed_accounts(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Create development accounts, one child and its first records."""
    if verbose:
        LOGGER.info("Seeding development accounts...")
    session = _session(database)
    summary: dict[str, dict[str, int]] = {}
    users: dict[str, User] = {}

    for fixture in USER_FIXTURES:
        email = fixture["email"].strip().lower()
        user = session.execute(select(User).filter_by(email=email)).scalar_one_or_none()
        created = user is None
        if user is None:
            user = User(email=email, full_name=fixture["full_name"])
            user.role = fixture["role"]
            user.password = fixture["password"]
            session.add(user)
            session.flush()
        users[email] = user
        _touch(summary, "users", created)

    vaccines = {v.code: v for v in session.execute(select(Vaccine)).scalars()}
    for fixture in CHILD_FIXTURES:
        owner = users[fixture["user_email"]]
        child, created = _get_or_create(
            session,
            Child,
            user_id=owner.id,
            first_name=fixture["first_name"],
            defaults={
                "last_name": fixture["last_name"],
                "date_of_birth": fixture["date_of_birth"],
                "sex": fixture["sex"],
            },
        )
        session.flush()
        _touch(summary, "children", created)
        for code, administered_on in fixture["records"]:
            vaccine = vaccines.get(code)
            if vaccine is None:
                LOGGER.warning("seed.unknown_vaccine code=%s", code)
                continue
            _, rec_created = _get_or_create(
                session,
                VaccineRecord,
                child_id=child.id,
                vaccine_id=vaccine.id,
                defaults={"administered_on": administered_on},
            )
            _touch(summary, "vaccine_records", rec_created)

    session.commit()
    return summary


def run_all(database: SQLAlchemy, *, verbose: bool = False) -> dict[str, dict[str, int]]:
    """Run all seeders in foreign-key order."""
    if verbose:
        LOGGER.info("Running full seed pipeline...")
    combined: dict[str, dict[str, int]] = {}
    for func in (seed_catalog, seed_accounts):
        result = func(database, verbose=verbose)
        for table, counters in result.items():
            entry = combined.setdefault(table, {"created": 0, "existing": 0})
            entry["created"] += counters.get("created", 0)
            entry["existing"] += counters.get("existing", 0)
    return combined


__all__ = ["run_all", "seed_accounts", "seed_catalog"]
