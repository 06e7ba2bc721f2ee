from vaxtrack.uow.base import UnitOfWork
from vaxtrack.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyRepositoryContainer,
    SQLAlchemyUnitOfWork,
)

__all__ = [
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyRepositoryContainer",
    "SQLAlchemyUnitOfWork",
    "UnitOfWork",
]
