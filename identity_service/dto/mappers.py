"""Utilities to map repository rows into DTOs."""

from __future__ import annotations

from collections.abc import Iterable

from identity_service.dto import UserDTO
from identity_service.repositories.interfaces import UserRow


def map_user(row: UserRow) -> UserDTO:
    return UserDTO(id=int(row.id), name=row.name, email=row.email)


def map_users(rows: Iterable[UserRow]) -> list[UserDTO]:
    return [map_user(r) for r in rows]
