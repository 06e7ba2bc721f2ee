"""Tests for the ``flask seed`` and ``flask users`` command groups."""

from __future__ import annotations

from sqlalchemy import func, select

from tests.factories.user import UserFactory
from vaxtrack.models import Child, User, Vaccine
from vaxtrack.seeds.seed_data import VACCINE_FIXTURES


def test_seed_run_is_idempotent(app, session):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed", "run"])
    assert first.exit_code == 0, first.output
    assert "Seed summary:" in first.output

    second = runner.invoke(args=["seed", "run"])
    assert second.exit_code == 0, second.output
    assert "created= 0" in second.output

    assert session.scalar(select(func.count(Vaccine.id))) == len(VACCINE_FIXTURES)
    admin = session.scalars(select(User).filter_by(email="admin@example.com")).one()
    assert admin.is_admin
    assert session.scalar(select(func.count(Child.id))) >= 1


def test_create_admin_promotes_existing_account(app, session):
    user = UserFactory(email="promote@example.com")
    session.commit()
    user_id = user.id

    result = app.test_cli_runner().invoke(
        args=["users", "create-admin", "Promote@Example.com", "--password", "whatever123"]
    )

    assert result.exit_code == 0, result.output
    session.expire_all()
    assert session.get(User, user_id).is_admin


def test_create_admin_creates_account(app, session):
    result = app.test_cli_runner().invoke(
        args=["users", "create-admin", "boss@example.com", "--password", "longenough1"]
    )

    assert result.exit_code == 0, result.output
    boss = session.scalars(select(User).filter_by(email="boss@example.com")).one()
    assert boss.is_admin
    assert boss.verify_password("longenough1")
