from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from http import HTTPStatus

from vaxtrack.core import errors as api_errors
from vaxtrack.repositories.base import Pagination
from vaxtrack.repositories.scoped import AccessScope
from vaxtrack.services._shared.dto import Identity
from vaxtrack.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    DomainValidationError,
    InternalError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    TokenExpiredError,
    TokenReusedError,
)
from vaxtrack.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

MAX_PAGE_SIZE = 100

_AUTH_CODES: tuple[tuple[type[AuthenticationError], str], ...] = (
    (InvalidCredentialsError, "invalid_credentials"),
    (TokenExpiredError, "token_expired"),
    (TokenReusedError, "token_reused"),
)


@dataclass(slots=True)
class ServiceContext:
    """
    Request-scoped data passed into services.

    :param identity: Verified caller, ``None`` for anonymous endpoints.
    :param request_id: Correlation id for logs and audit records.
    :param ip: Client address (after ProxyFix).
    """

    identity: Identity | None = None
    request_id: str | None = None
    ip: str | None = None

    @property
    def actor_id(self) -> int | None:
        return self.identity.user_id if self.identity else None


def translate_exceptions(exc: ServiceError) -> api_errors.APIError:
    """
    Map a service-level error to its HTTP (RFC 7807) counterpart.

    :param exc: Error raised within the service layer.
    :returns: API error ready to be rendered by the error handlers.
    """
    if isinstance(exc, AuthenticationError):
        code = next((c for kind, c in _AUTH_CODES if isinstance(exc, kind)), "invalid_token")
        return api_errors.Unauthorized(str(exc), code=code)

    if isinstance(exc, NotFoundError):
        # never echo the key: cross-tenant ids must not leak
        return api_errors.NotFound(str(exc))

    if isinstance(exc, ConflictError):
        return api_errors.Conflict(str(exc))

    if isinstance(exc, DomainValidationError):
        details = {"errors": {exc.field: [str(exc)]}} if exc.field else None
        return api_errors.APIError(
            str(exc),
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            details=details,
        )

    if isinstance(exc, InternalError):
        return api_errors.Internal()

    return api_errors.APIError(str(exc), status_code=400, code="bad_request")


class BaseService:
    """
    Base class for application services.

    * Opens read-only and read-write units of work, scoped to the caller
      when an identity is present.
    * Offers shared validation helpers (pagination).

    Services never touch the global session directly; always use a UoW.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    # -------------------------- Identity ------------------------------------

    @property
    def identity(self) -> Identity:
        if self.ctx.identity is None:
            raise RuntimeError(f"{type(self).__name__} requires an authenticated identity.")
        return self.ctx.identity

    def scope(self) -> AccessScope:
        return AccessScope.of(self.identity)

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self, *, scoped: bool = False) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :param scoped: Expose the owner-scoped repositories for the caller.
        """
        return SQLAlchemyUnitOfWork(scope=self.scope() if scoped else None)

    def ro_uow(
        self, *, scoped: bool = False, isolation: str | None = None
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param scoped: Expose the owner-scoped repositories for the caller.
        :param isolation: Transaction isolation level hint.
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            scope=self.scope() if scoped else None,
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(
        self, *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Build a :class:`Pagination`, clamping ``page >= 1`` and ``1 <= limit <= 100``."""
        page = max(1, int(page))
        limit = min(max(1, int(limit)), MAX_PAGE_SIZE)
        return Pagination(page=page, limit=limit, sort=list(sort or []))
