"""Public DTO exports for FastAPI response models."""

from .user import UserDTO

__all__ = [
    "UserDTO",
]
