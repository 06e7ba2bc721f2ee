"""Authentication lifecycle: register, login, refresh, logout, account deletion."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError

from vaxtrack.models.audit_log import OUTCOME_FAILURE, OUTCOME_SUCCESS
from vaxtrack.models.user import Role, User
from vaxtrack.services._shared.base import BaseService, ServiceContext
from vaxtrack.services._shared.errors import (
    ConflictError,
    DomainValidationError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    ServiceError,
    TokenReusedError,
)
from vaxtrack.services._shared.ports import AuditEvent, AuditSink
from vaxtrack.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn, UserOut
from vaxtrack.services.tokens.dto import TokenPair
from vaxtrack.services.tokens.service import TokenService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class _Principal:
    """Detached ``(id, role)`` pair handed to :meth:`TokenService.issue`."""

    id: int
    role: str


def to_user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        role=user.role,
        full_name=user.full_name,
        created_at=user.created_at,
    )


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Token policy lives in :class:`TokenService`; this service verifies
    credentials, orchestrates the token calls and records every state change
    in the audit sink. Failures are audited after the failed unit of work has
    rolled back, so the audit row never depends on it.
    """

    def __init__(
        self,
        *,
        tokens: TokenService,
        audit: AuditSink,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.tokens = tokens
        self.audit = audit

    # ------------------------------------------------------------------ #
    # Audit helpers
    # ------------------------------------------------------------------ #

    def _audit(
        self,
        action: str,
        outcome: str,
        *,
        actor_id: int | None = None,
        target: str | None = None,
        **detail: Any,
    ) -> None:
        self.audit.record(
            AuditEvent(
                action=action,
                outcome=outcome,
                actor_id=actor_id if actor_id is not None else self.ctx.actor_id,
                target=target,
                ip=self.ctx.ip,
                request_id=self.ctx.request_id,
                detail={k: v for k, v in detail.items() if v is not None},
            )
        )

    def _audited(self, action: str, fn: Callable[[], T], **failure_detail: Any) -> T:
        """Run ``fn``; on a service error audit a failure and re-raise."""
        try:
            return fn()
        except TokenReusedError as exc:
            self._audit(
                "auth.refresh_reuse",
                OUTCOME_FAILURE,
                actor_id=exc.user_id,
                target=f"refresh_family:{exc.family_id}",
                reason="token_reused",
            )
            raise
        except ServiceError as exc:
            self._audit(action, OUTCOME_FAILURE, reason=type(exc).__name__, **failure_detail)
            raise

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserOut:
        """
        Create a ``parent`` account.

        :raises ConflictError: The email is already registered.
        :raises DomainValidationError: Email or password rejected by the model.
        """

        def _create() -> UserOut:
            try:
                with self.rw_uow() as uow:
                    if uow.users.exists_by_email(dto.email):
                        raise ConflictError("User", "Email already registered.")
                    try:
                        user = User(email=dto.email, full_name=dto.full_name)
                        user.role = Role.PARENT.value
                        user.password = dto.password
                    except ValueError as exc:
                        raise DomainValidationError(str(exc)) from exc
                    uow.users.add(user)
                    out = to_user_out(user)
            except IntegrityError as exc:
                raise ConflictError("User", "Email already registered.") from exc
            return out

        out = self._audited("auth.register", _create)
        self._audit("auth.register", OUTCOME_SUCCESS, actor_id=out.id, target=f"user:{out.id}")
        logger.info("auth.register", extra={"user_id": out.id})
        return out

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPair:
        """
        Verify credentials and open a new session lineage.

        :raises InvalidCredentialsError: Unknown email or wrong password. Both
            cases are indistinguishable to the caller.
        """

        def _login() -> TokenPair:
            with self.ro_uow() as uow:
                user = uow.users.authenticate(dto.email, dto.password)
                if user is None:
                    raise InvalidCredentialsError()
                principal = _Principal(id=user.id, role=user.role)
            return self.tokens.issue(principal)

        pair = self._audited("auth.login", _login, email=dto.email)
        self._audit(
            "auth.login",
            OUTCOME_SUCCESS,
            actor_id=pair.user_id,
            target=f"refresh_family:{pair.family_id}",
        )
        logger.info("auth.login", extra={"user_id": pair.user_id, "family_id": pair.family_id})
        return pair

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def _role_of(self, user_id: int) -> str | None:
        with self.ro_uow() as uow:
            return uow.users.get_role(user_id)

    def refresh(self, dto: RefreshIn) -> TokenPair:
        """
        Rotate a refresh token.

        :raises TokenReusedError: The token was already rotated; its whole
            lineage is now revoked.
        """
        pair = self._audited(
            "auth.refresh", lambda: self.tokens.rotate(dto.refresh_token, self._role_of)
        )
        self._audit(
            "auth.refresh",
            OUTCOME_SUCCESS,
            actor_id=pair.user_id,
            target=f"refresh_family:{pair.family_id}",
        )
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> None:
        """
        Revoke the caller's current lineage.

        A supplied refresh token must belong to the caller; its lineage is
        revoked as well. ``all_sessions`` revokes every lineage of the caller.
        """
        identity = self.identity

        def _logout() -> list[str]:
            if dto.all_sessions:
                self.tokens.revoke_all_for_user(identity.user_id)
                return []
            families = [identity.family_id]
            if dto.refresh_token:
                # a foreign token must fail before anything is revoked
                claims = self.tokens.decode_refresh(dto.refresh_token)
                if int(claims["sub"]) != identity.user_id:
                    raise InvalidTokenError()
                if str(claims["fid"]) not in families:
                    families.append(str(claims["fid"]))
            for family_id in families:
                self.tokens.revoke_family(family_id)
            return families

        families = self._audited("auth.logout", _logout)
        if dto.all_sessions:
            self._audit(
                "auth.logout", OUTCOME_SUCCESS, target=f"user:{identity.user_id}", all_sessions=True
            )
        else:
            for family_id in families:
                self._audit("auth.logout", OUTCOME_SUCCESS, target=f"refresh_family:{family_id}")
        logger.info("auth.logout", extra={"user_id": identity.user_id})

    # ------------------------------------------------------------------ #
    # Current account
    # ------------------------------------------------------------------ #

    def me(self) -> UserOut:
        with self.ro_uow() as uow:
            user = uow.users.get(self.identity.user_id)
            if user is None:
                raise NotFoundError("User", self.identity.user_id)
            return to_user_out(user)

    def delete_account(self) -> None:
        """
        Delete the caller's account.

        Sessions are revoked first; the delete then cascades to the profile,
        children, their records and the refresh session rows.
        """
        identity = self.identity

        def _delete() -> None:
            self.tokens.revoke_all_for_user(identity.user_id)
            with self.rw_uow() as uow:
                user = uow.users.get(identity.user_id)
                if user is None:
                    raise NotFoundError("User", identity.user_id)
                uow.users.delete(user)

        self._audited("account.delete", _delete)
        self._audit("account.delete", OUTCOME_SUCCESS, target=f"user:{identity.user_id}")
        logger.info("account.delete", extra={"user_id": identity.user_id})

