"""DTOs for user resources exposed via the public API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserDTO(BaseModel):
    id: int = Field(description="User ID (assigned by storage)")
    name: str = Field(description="Display name")
    email: str = Field(description="Email address, unique regardless of case")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Alice",
                "email": "alice@example.com",
            }
        },
    )
