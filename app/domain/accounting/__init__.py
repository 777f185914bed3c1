"""Accounting domain module."""

from .enums import (
    AccountType,
    CodeKind,
    CodeNature,
    SourceModule,
    JournalStatus,
)
from .exceptions import (
    AccountingError,
    ValidationError,
    ConflictError,
    StateError,
    NotFoundError,
)

__all__ = [
    "AccountType",
    "CodeKind",
    "CodeNature",
    "SourceModule",
    "JournalStatus",
    "AccountingError",
    "ValidationError",
    "ConflictError",
    "StateError",
    "NotFoundError",
]
