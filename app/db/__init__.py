"""Database access."""

from .session import Database

__all__ = ["Database"]
