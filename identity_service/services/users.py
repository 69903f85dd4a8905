"""User use cases: listing and creation.

``UserService`` is the only place where failures are classified into the
domain error taxonomy. It holds no mutable state, so a single instance is
shared by every request.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError

from identity_service.core.exceptions import BadRequestError, ConflictError, InternalError
from identity_service.dto import UserDTO
from identity_service.dto.mappers import map_user, map_users
from identity_service.infra.unit_of_work import UnitOfWorkFactory
from identity_service.logging import get_logger
from identity_service.repositories.interfaces import DuplicateEmailError
from identity_service.services.validation import UserValidator, ValidationErrors

EMAIL_TAKEN = "user with this email already exists"

logger = get_logger(__name__)

T = TypeVar("T")


async def _bounded(op: Awaitable[T], timeout: float | None, action: str) -> T:
    # Expiry cancels the pending storage await; CancelledError passes through.
    try:
        return await asyncio.wait_for(op, timeout)
    except asyncio.TimeoutError as exc:
        logger.warning("user_op_timeout", action=action, timeout_s=timeout)
        raise InternalError("request timed out", cause=exc) from exc


class UserService:
    def __init__(self, uow_factory: UnitOfWorkFactory, validator: UserValidator) -> None:
        self._uow_factory = uow_factory
        self._validator = validator

    async def list_users(self, *, timeout: float | None = None) -> list[UserDTO]:
        return await _bounded(self._list_users(), timeout, "list_users")

    async def create_user(self, name: str, email: str, *, timeout: float | None = None) -> UserDTO:
        return await _bounded(self._create_user(name, email), timeout, "create_user")

    async def _list_users(self) -> list[UserDTO]:
        try:
            async with self._uow_factory() as uow:
                rows = await uow.users.list_all()
        except SQLAlchemyError as exc:
            logger.error("user_list_failed", error=str(exc))
            raise InternalError("failed to retrieve users", cause=exc) from exc
        return map_users(rows)

    async def _create_user(self, name: str, email: str) -> UserDTO:
        try:
            self._validator.check_create_user_request(name, email)
        except ValidationErrors as exc:
            raise BadRequestError("validation failed", cause=exc) from exc

        try:
            async with self._uow_factory() as uow:
                try:
                    taken = await uow.users.email_exists(email)
                except SQLAlchemyError as exc:
                    logger.error("user_email_check_failed", error=str(exc))
                    raise InternalError("failed to check email existence", cause=exc) from exc
                if taken:
                    logger.info("user_create_conflict", stage="precheck")
                    raise ConflictError(EMAIL_TAKEN)

                try:
                    row = await uow.users.insert(name=name, email=email)
                    await uow.commit()
                except DuplicateEmailError as exc:
                    # Lost the race against a concurrent insert of the same email.
                    logger.info("user_create_conflict", stage="insert")
                    raise ConflictError(EMAIL_TAKEN, cause=exc) from exc
                except SQLAlchemyError as exc:
                    logger.error("user_insert_failed", error=str(exc))
                    raise InternalError("failed to create user", cause=exc) from exc
        except SQLAlchemyError as exc:
            # Session setup or teardown failed outside the steps above.
            logger.error("user_insert_failed", error=str(exc))
            raise InternalError("failed to create user", cause=exc) from exc

        logger.info("user_created", user_id=row.id)
        return map_user(row)
