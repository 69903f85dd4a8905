# Alembic and the schema bootstrap discover tables through these imports.
from .base import Base
from .user import User

__all__ = ["Base", "User"]
