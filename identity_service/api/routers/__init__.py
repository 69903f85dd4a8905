"""Router modules exposed for convenient imports."""

from . import healthz, readyz, users

__all__ = ["healthz", "readyz", "users"]
