from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.models import User


class HealthService:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def ok(self) -> dict:
        # Touches the users table so a missing schema fails readiness too.
        await self._session.execute(select(User.id).limit(1))
        return {"ok": True}
