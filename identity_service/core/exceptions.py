"""Domain-level error taxonomy for the service and transport layers.

Every failure leaving the service layer is exactly one of the kinds below.
Each kind carries a stable symbolic code and the transport status the API
layer answers with. Lower-level causes are kept for diagnostics and never
reach the caller.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    BAD_REQUEST = ("bad_request", 400)
    CONFLICT = ("conflict", 409)
    NOT_FOUND = ("not_found", 404)
    INTERNAL = ("internal", 500)

    def __init__(self, code: str, status_code: int) -> None:
        self.code = code
        self.status_code = status_code


class DomainError(Exception):
    """Base class for classified failures.

    Not instantiable on its own: pick the subclass matching the failure.
    """

    kind: ErrorKind

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        if type(self) is DomainError:
            raise TypeError("DomainError must be raised through a concrete kind")
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.code!r}, message={self.message!r})"


class BadRequestError(DomainError):
    """Raised when the caller sent input that cannot be processed."""

    kind = ErrorKind.BAD_REQUEST


class ConflictError(DomainError):
    """Raised when a state conflict occurs (e.g. duplicate entries)."""

    kind = ErrorKind.CONFLICT


class NotFoundError(DomainError):
    """Raised when a requested entity does not exist."""

    kind = ErrorKind.NOT_FOUND


class InternalError(DomainError):
    """Raised when storage or another internal dependency failed."""

    kind = ErrorKind.INTERNAL


__all__ = [
    "ErrorKind",
    "DomainError",
    "BadRequestError",
    "ConflictError",
    "NotFoundError",
    "InternalError",
]
