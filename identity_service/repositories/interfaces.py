"""Repository abstractions for the service layer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass
class UserRow:
    id: int
    name: str
    email: str
    created_at: datetime | None = None


class DuplicateEmailError(Exception):
    """Raised by ``insert`` when the store's unique email index rejects the row."""

    def __init__(self, email: str) -> None:
        super().__init__(f"email already stored: {email}")
        self.email = email


class UserRepository(Protocol):
    """Storage boundary for user records.

    Failures other than ``DuplicateEmailError`` surface as ``SQLAlchemyError``.
    """

    async def list_all(self) -> list[UserRow]: ...

    async def insert(self, *, name: str, email: str) -> UserRow: ...

    async def email_exists(self, email: str) -> bool: ...
