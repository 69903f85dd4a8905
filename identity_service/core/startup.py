"""Startup helpers for schema bootstrap and readiness tracking."""

from __future__ import annotations

import asyncio

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine

from identity_service.models import Base

_SCHEMA_READY: bool = False
_SCHEMA_ERROR: str | None = None


def is_schema_ready() -> bool:
    """Return True once the users schema is known to exist."""

    return _SCHEMA_READY


def last_schema_error() -> str | None:
    """Return the most recent bootstrap error message if available."""

    return _SCHEMA_ERROR


def mark_schema_ready() -> None:
    """Used when the schema is managed out of band (Alembic)."""

    global _SCHEMA_READY, _SCHEMA_ERROR
    _SCHEMA_READY = True
    _SCHEMA_ERROR = None


async def init_schema(engine: AsyncEngine, *, timeout: float | None = None) -> None:
    """Create the users table and its indexes if missing, in one transaction.

    Idempotent. Raises on failure or when ``timeout`` expires; the readiness
    flag stays down in that case.
    """

    global _SCHEMA_READY, _SCHEMA_ERROR
    logger = structlog.get_logger(__name__)
    logger.info("schema_init_start", timeout_s=timeout)

    async def _create() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    try:
        await asyncio.wait_for(_create(), timeout)
    except Exception as exc:
        _SCHEMA_READY = False
        _SCHEMA_ERROR = str(exc) or exc.__class__.__name__
        logger.error("schema_init_failed", error=_SCHEMA_ERROR)
        raise

    mark_schema_ready()
    logger.info("schema_init_succeeded")


def reset_schema_state() -> None:
    global _SCHEMA_READY, _SCHEMA_ERROR
    _SCHEMA_READY = False
    _SCHEMA_ERROR = None


__all__ = [
    "init_schema",
    "is_schema_ready",
    "last_schema_error",
    "mark_schema_ready",
    "reset_schema_state",
]
