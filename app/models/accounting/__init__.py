"""Accounting models."""

from .code import Code
from .fiscal_year import FiscalYear
from .journal import Journal, JournalItem, JournalSequence

__all__ = [
    "Code",
    "FiscalYear",
    "Journal",
    "JournalItem",
    "JournalSequence",
]
