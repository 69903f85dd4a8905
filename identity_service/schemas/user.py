from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserCreateRequest(BaseModel):
    # Deliberately loose: emptiness, length and format are reported together
    # by the service validator, not rejected here one field at a time.
    name: str = Field(default="", description="Display name")
    email: str = Field(default="", description="Email address")

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={"examples": [{"name": "Alice", "email": "alice@example.com"}]},
    )


class ValidationErrorResponse(BaseModel):
    detail: str = Field(description="Always 'validation failed'")
    errors: list[dict[str, str]] = Field(description="One {field: message} entry per violation")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "detail": "validation failed",
                    "errors": [{"name": "is required"}, {"email": "invalid email format"}],
                }
            ]
        }
    }
