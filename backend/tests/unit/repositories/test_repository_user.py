"""Unit tests for UserRepository."""

from __future__ import annotations

import pytest

from tests.factories.user import UserFactory
from vaxtrack.repositories import UserRepository


class TestUserRepository:
    """Ensure ``UserRepository`` performs credential lookups."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_email_is_case_insensitive(self, repo, session):
        u = UserFactory(email="alice@example.com")
        session.commit()

        fetched = repo.get_by_email("  ALICE@example.com ")
        assert fetched is not None
        assert fetched.id == u.id

    def test_exists_by_email(self, repo, session):
        UserFactory(email="bob@example.com")
        session.commit()

        assert repo.exists_by_email("bob@example.com")
        assert not repo.exists_by_email("nonexistent@example.com")

    def test_authenticate(self, repo, session):
        u = UserFactory(email="c@example.com", password="correct-horse")
        session.commit()

        assert repo.authenticate("c@example.com", "correct-horse").id == u.id
        assert repo.authenticate("c@example.com", "wrong") is None
        assert repo.authenticate("nobody@example.com", "correct-horse") is None

    def test_get_role(self, repo, session):
        u = UserFactory(role="admin")
        session.commit()

        assert repo.get_role(u.id) == "admin"
        assert repo.get_role(987654) is None

    def test_update_rejects_non_whitelisted_fields(self, repo, session):
        u = UserFactory()
        session.commit()

        repo.update(u, full_name="Renamed")
        assert u.full_name == "Renamed"
        with pytest.raises(ValueError):
            repo.update(u, role="admin")

    def test_authenticate_unknown_email_still_checks_a_hash(self, repo, session, monkeypatch):
        from vaxtrack.models import user as user_module

        checked: list[str] = []
        real_check = user_module.check_password_hash

        def spy(pwhash: str, raw: str) -> bool:
            checked.append(raw)
            return real_check(pwhash, raw)

        monkeypatch.setattr(user_module, "check_password_hash", spy)

        assert repo.authenticate("ghost@example.com", "guess-1") is None
        assert checked == ["guess-1"]
