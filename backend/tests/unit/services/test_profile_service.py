"""Unit tests for ProfileService upserts."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from tests.helpers.utils import ctx_for
from vaxtrack.models import Profile
from vaxtrack.services._shared.errors import NotFoundError
from vaxtrack.services.profiles.service import ProfileService


@pytest.fixture()
def user(session):
    u = UserFactory(full_name="Grace")
    session.commit()
    return u


def test_get_before_first_save_returns_empty_profile(user):
    out = ProfileService(ctx=ctx_for(user)).get()

    assert out.user_id == user.id
    assert out.full_name == "Grace"
    assert out.phone is None


def test_upsert_creates_then_updates(user, session):
    service = ProfileService(ctx=ctx_for(user))

    created = service.upsert({"phone": "+34 600 000 000", "full_name": "Grace H."})
    assert created.phone == "+34 600 000 000"
    assert created.full_name == "Grace H."

    updated = service.upsert({"preferred_language": "es"})
    assert updated.phone == "+34 600 000 000"
    assert updated.preferred_language == "es"
    assert session.query(Profile).filter_by(user_id=user.id).count() == 1


def test_profile_of_deleted_account(session):
    ghost = UserFactory()
    session.commit()
    ctx = ctx_for(ghost)
    session.delete(ghost)
    session.commit()

    with pytest.raises(NotFoundError):
        ProfileService(ctx=ctx).get()
