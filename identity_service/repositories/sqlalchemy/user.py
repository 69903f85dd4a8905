"""SQLAlchemy implementation of the user repository."""

from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.models import User
from identity_service.repositories.interfaces import (
    DuplicateEmailError,
    UserRepository,
    UserRow,
)

# SQLSTATE unique_violation
_PG_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    # asyncpg exposes sqlstate, psycopg exposes pgcode
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == _PG_UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(orig)


def _to_row(user: User) -> UserRow:
    return UserRow(
        id=int(user.id),
        name=user.name,
        email=user.email,
        created_at=user.created_at,
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[UserRow]:
        stmt = select(User).order_by(User.id.asc())
        users = (await self._session.scalars(stmt)).all()
        return [_to_row(u) for u in users]

    async def insert(self, *, name: str, email: str) -> UserRow:
        user = User(name=name, email=email)
        self._session.add(user)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise DuplicateEmailError(email) from exc
            raise
        await self._session.refresh(user)
        return _to_row(user)

    async def email_exists(self, email: str) -> bool:
        stmt = select(exists().where(func.lower(User.email) == func.lower(email)))
        return bool(await self._session.scalar(stmt))
