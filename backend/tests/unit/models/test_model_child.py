"""Unit tests for Child and VaccineRecord models."""

from __future__ import annotations

from datetime import date

import pytest

from tests.factories.catalog import VaccineFactory
from tests.factories.child import ChildFactory, VaccineRecordFactory
from vaxtrack.models import Child


def test_first_name_is_stripped_and_required():
    child = Child(first_name="  Robin ", date_of_birth=date(2024, 1, 1))
    assert child.first_name == "Robin"
    with pytest.raises(ValueError):
        Child(first_name="   ", date_of_birth=date(2024, 1, 1))


def test_sex_must_be_known():
    with pytest.raises(ValueError):
        Child(first_name="A", date_of_birth=date(2024, 1, 1), sex="unknown-value")


def test_records_are_ordered_by_administration_date(session):
    child = ChildFactory()
    late = VaccineRecordFactory(child=child, administered_on=date(2024, 6, 1))
    early = VaccineRecordFactory(child=child, administered_on=date(2024, 2, 1))
    session.commit()
    session.expire(child)

    assert [r.id for r in child.records] == [early.id, late.id]


def test_record_loads_vaccine_eagerly(session):
    vaccine = VaccineFactory(code="MMR-1", name="Measles, mumps, rubella")
    record = VaccineRecordFactory(vaccine=vaccine)
    session.commit()

    assert record.vaccine.code == "MMR-1"
    assert record.child.user is not None
