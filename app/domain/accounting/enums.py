"""Accounting domain enums."""

from enum import Enum as PyEnum, IntEnum


class AccountType(str, PyEnum):
    """Financial statement category of a code."""
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"


class CodeKind(str, PyEnum):
    """Tier of a node in the chart of codes."""
    GROUP = "group"
    GENERAL = "general"
    SPECIFIC = "specific"


class CodeNature(IntEnum):
    """Normal balance side of a code."""
    DEBIT = 0
    CREDIT = 1


class SourceModule(str, PyEnum):
    """Subsystem that caused a journal to be created."""
    MANUAL = "manual"  # Manual entry
    REVERSAL = "reversal"  # Reversal of a posted journal
    TREASURY = "treasury"  # Receipts and payments
    INVOICE = "invoice"  # Sales and purchase invoices
    INVENTORY = "inventory"
    SYSTEM = "system"  # System-generated


class JournalStatus(str, PyEnum):
    """Journal status."""
    DRAFT = "draft"
    POSTED = "posted"

    @classmethod
    def _missing_(cls, value):
        # Older data uses temporary/permanent for draft/posted
        synonyms = {"temporary": cls.DRAFT, "permanent": cls.POSTED}
        if isinstance(value, str):
            return synonyms.get(value.lower())
        return None
