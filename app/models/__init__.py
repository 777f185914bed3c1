"""Database models."""

from .base import Base, TimestampMixin
from .accounting import (
    Code,
    FiscalYear,
    Journal,
    JournalItem,
    JournalSequence,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "Code",
    "FiscalYear",
    "Journal",
    "JournalItem",
    "JournalSequence",
]
