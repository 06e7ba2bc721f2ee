"""User repository: credential store lookups."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import select

from vaxtrack.models.user import User, check_against_decoy
from vaxtrack.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only access to :class:`User`. Never touches tokens."""

    model = User

    def _sortable_fields(self):
        return {"id": User.id, "email": User.email, "created_at": User.created_at}

    def _filterable_fields(self):
        return {"email": User.email, "role": User.role}

    def _updatable_fields(self):
        return {"full_name"}

    def get_by_email(self, email: str) -> User | None:
        """
        Fetch a user by email, case-insensitively.

        :param email: Raw email; normalized before the lookup.
        :returns: User or ``None``.
        """
        stmt = select(User).where(User.email == email.strip().lower())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip().lower())
        return self.session.execute(stmt).first() is not None

    def get_role(self, user_id: Any) -> str | None:
        """Return the current role of ``user_id``; ``None`` if the account is gone."""
        stmt = select(User.role).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar_one_or_none())

    def authenticate(self, email: str, password: str) -> User | None:
        """
        Return the user when ``password`` matches; ``None`` otherwise.

        An unknown email still pays for one hash check, so response time does
        not reveal which addresses are registered.
        """
        user = self.get_by_email(email)
        if user is None:
            check_against_decoy(password)
            return None
        return user if user.verify_password(password) else None
