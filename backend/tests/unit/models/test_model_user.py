"""Unit tests for the User model."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from tests.factories.child import ChildFactory, VaccineRecordFactory
from tests.factories.user import UserFactory
from vaxtrack.models import Child, Profile, RefreshSession, User, VaccineRecord
from vaxtrack.models.user import Role


def test_email_is_normalized():
    user = User(email="  Parent@Example.COM ", full_name="P")
    assert user.email == "parent@example.com"


@pytest.mark.parametrize("bad", ["", "no-at-sign", "missing@tld"])
def test_invalid_email_rejected(bad):
    with pytest.raises(ValueError):
        User(email=bad)


def test_password_is_hashed_and_write_only(session):
    user = UserFactory(password="s3cret-pass")
    session.commit()

    assert user.password_hash != "s3cret-pass"
    assert user.verify_password("s3cret-pass")
    assert not user.verify_password("wrong")
    with pytest.raises(AttributeError):
        _ = user.password


def test_empty_password_rejected():
    user = User(email="a@example.com")
    with pytest.raises(ValueError):
        user.password = ""


def test_unknown_role_rejected():
    user = User(email="a@example.com")
    with pytest.raises(ValueError):
        user.role = "superuser"


def test_role_accepts_enum_and_exposes_admin_flag():
    user = User(email="a@example.com")
    user.role = Role.ADMIN
    assert user.role == "admin"
    assert user.is_admin


def test_email_unique(session):
    UserFactory(email="dup@example.com")
    session.commit()
    with pytest.raises(IntegrityError):
        UserFactory(email="DUP@example.com")
    session.rollback()


def test_delete_cascades_to_owned_rows(session):
    record = VaccineRecordFactory()
    user = record.child.user
    user.profile = Profile(phone="555-0100")
    now = datetime.now(timezone.utc)
    session.add(
        RefreshSession(
            jti="jti-cascade",
            user_id=user.id,
            family_id="fam",
            issued_at=now,
            expires_at=now + timedelta(days=7),
        )
    )
    session.commit()
    user_id = user.id

    session.delete(user)
    session.commit()

    assert session.get(User, user_id) is None
    assert session.scalars(select(Child).where(Child.user_id == user_id)).all() == []
    assert session.scalars(select(VaccineRecord)).all() == []
    assert session.scalars(select(Profile).where(Profile.user_id == user_id)).all() == []
    assert session.get(RefreshSession, "jti-cascade") is None


def test_other_users_rows_survive_deletion(session):
    keep = ChildFactory()
    drop = ChildFactory()
    session.commit()
    keep_id = keep.id

    session.delete(drop.user)
    session.commit()

    assert session.get(Child, keep_id) is not None
