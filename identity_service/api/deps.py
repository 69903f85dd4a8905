"""API dependency helpers and service providers."""

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from identity_service.core.config import Settings
from identity_service.db import session_scope
from identity_service.services.users import UserService

__all__ = [
    "get_async_session",
    "get_settings",
    "get_user_service",
]


# --- Service providers for DI ---
# Built once in create_app and kept on app.state; nothing here is per request.


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


async def get_async_session(request: Request) -> AsyncIterator[AsyncSession]:
    async for session in session_scope(request.app.state.session_factory):
        yield session
