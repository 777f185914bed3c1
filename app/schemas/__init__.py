"""Pydantic schemas for API requests and responses."""

from .codes import (
    CodeCreate,
    CodeUpdate,
    CodeResponse,
    CodeTreeNode,
)
from .fiscal_years import (
    FiscalYearCreate,
    FiscalYearUpdate,
    FiscalYearResponse,
    OpenNextRequest,
)
from .journals import (
    JournalItemCreate,
    JournalItemResponse,
    JournalCreate,
    JournalUpdate,
    JournalReverseRequest,
    JournalResponse,
)

__all__ = [
    "CodeCreate",
    "CodeUpdate",
    "CodeResponse",
    "CodeTreeNode",
    "FiscalYearCreate",
    "FiscalYearUpdate",
    "FiscalYearResponse",
    "OpenNextRequest",
    "JournalItemCreate",
    "JournalItemResponse",
    "JournalCreate",
    "JournalUpdate",
    "JournalReverseRequest",
    "JournalResponse",
]
