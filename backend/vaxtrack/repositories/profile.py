"""Profile repository (owner-scoped, 1:1 with the user)."""

from __future__ import annotations

from typing import cast

from vaxtrack.models.profile import Profile
from vaxtrack.repositories.scoped import OwnerScopedRepository


class ProfileRepository(OwnerScopedRepository[Profile]):
    model = Profile
    entity_name = "Profile"

    def _owner_column(self):
        return Profile.user_id

    def _updatable_fields(self):
        return {"phone", "address", "preferred_language"}

    def get_own(self) -> Profile | None:
        """Return the caller's own profile (admins included), if any."""
        stmt = self._base_select().where(Profile.user_id == self.scope.user_id)
        return cast(Profile | None, self.session.execute(stmt).scalars().first())
