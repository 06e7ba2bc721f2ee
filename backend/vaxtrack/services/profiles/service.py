from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vaxtrack.models.profile import Profile
from vaxtrack.services._shared.base import BaseService
from vaxtrack.services._shared.errors import NotFoundError
from vaxtrack.services.profiles.dto import ProfileOut

PROFILE_FIELDS = ("phone", "address", "preferred_language")


class ProfileService(BaseService):
    """Read and upsert the caller's own profile."""

    def _out(self, full_name: str | None, profile: Profile | None) -> ProfileOut:
        return ProfileOut(
            user_id=self.identity.user_id,
            full_name=full_name,
            phone=profile.phone if profile else None,
            address=profile.address if profile else None,
            preferred_language=profile.preferred_language if profile else None,
        )

    def get(self) -> ProfileOut:
        with self.ro_uow(scoped=True) as uow:
            user = uow.users.get(self.identity.user_id)
            if user is None:
                raise NotFoundError("User", self.identity.user_id)
            return self._out(user.full_name, uow.profiles.get_own())

    def upsert(self, fields: Mapping[str, Any]) -> ProfileOut:
        """
        Create or update the caller's profile.

        ``full_name`` is stored on the account; the remaining keys on the
        profile row.
        """
        with self.rw_uow(scoped=True) as uow:
            user = uow.users.get(self.identity.user_id)
            if user is None:
                raise NotFoundError("User", self.identity.user_id)
            if "full_name" in fields:
                uow.users.assign_updates(user, {"full_name": fields["full_name"]}, flush=False)

            profile = uow.profiles.get_own()
            updates = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
            if profile is None:
                profile = uow.profiles.add(Profile(user_id=user.id, **updates))
            elif updates:
                uow.profiles.assign_updates(profile, updates)
            uow.session.flush()
            return self._out(user.full_name, profile)
