"""Field validation for user creation requests.

Checks never stop at the first failure: every field is checked and all
violations are reported together, in field order (name, then email). Limits
and the email pattern come from settings so policy can change without code
changes.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from identity_service.core.config import Settings

REQUIRED = "is required"
INVALID_EMAIL = "invalid email format"


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class ValidationErrors(Exception):
    """One or more field violations; always the caller's fault."""

    def __init__(self, violations: Iterable[FieldViolation]) -> None:
        self.violations: tuple[FieldViolation, ...] = tuple(violations)
        if not self.violations:
            raise ValueError("ValidationErrors requires at least one violation")
        super().__init__("; ".join(str(v) for v in self.violations))

    def as_items(self) -> list[dict[str, str]]:
        """``[{field: message}, ...]`` in check order."""
        return [{v.field: v.message} for v in self.violations]


def _too_long(limit: int) -> str:
    return f"must be at most {limit} characters"


class UserValidator:
    def __init__(self, *, max_name_length: int, max_email_length: int, email_pattern: str) -> None:
        self.max_name_length = max_name_length
        self.max_email_length = max_email_length
        self._email_re = re.compile(email_pattern)

    @classmethod
    def from_settings(cls, settings: Settings) -> UserValidator:
        return cls(
            max_name_length=settings.validation_max_name_length,
            max_email_length=settings.validation_max_email_length,
            email_pattern=settings.validation_email_regex,
        )

    def validate_name(self, name: str) -> FieldViolation | None:
        if not name:
            return FieldViolation("name", REQUIRED)
        if len(name) > self.max_name_length:
            return FieldViolation("name", _too_long(self.max_name_length))
        return None

    def validate_email(self, email: str) -> FieldViolation | None:
        if not email:
            return FieldViolation("email", REQUIRED)
        # Oversized input is reported as such and never run through the pattern.
        if len(email) > self.max_email_length:
            return FieldViolation("email", _too_long(self.max_email_length))
        if self._email_re.fullmatch(email) is None:
            return FieldViolation("email", INVALID_EMAIL)
        return None

    def validate_create_user_request(self, name: str, email: str) -> list[FieldViolation]:
        checks = (self.validate_name(name), self.validate_email(email))
        return [v for v in checks if v is not None]

    def check_create_user_request(self, name: str, email: str) -> None:
        violations = self.validate_create_user_request(name, email)
        if violations:
            raise ValidationErrors(violations)
