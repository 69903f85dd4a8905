"""Infrastructure helpers such as Unit of Work implementations."""

from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    UnitOfWork,
    UnitOfWorkFactory,
    sqlalchemy_uow_factory,
)

__all__ = ["UnitOfWork", "UnitOfWorkFactory", "SqlAlchemyUnitOfWork", "sqlalchemy_uow_factory"]
