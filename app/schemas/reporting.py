"""Reporting schemas for accounting reports."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.domain.accounting.enums import AccountType, CodeKind


# Trial Balance Schemas
class TrialBalanceRow(BaseModel):
    """A code in the trial balance; non-leaf rows carry the rollup of their descendants."""
    code_id: UUID
    code: str
    title: str
    kind: CodeKind
    debit: Decimal
    credit: Decimal


class TrialBalanceResponse(BaseModel):
    """Trial Balance report response."""
    fiscal_year_id: UUID
    rows: List[TrialBalanceRow]
    total_debit: Decimal
    total_credit: Decimal
    balanced: bool


# Ledger Schemas
class LedgerEntry(BaseModel):
    """A posted item with the running balance after it."""
    journal_id: UUID
    serial_no: Optional[int] = None
    date: date
    ref_no: Optional[str] = None
    description: Optional[str] = None
    code_id: UUID
    code: str
    party_id: Optional[UUID] = None
    debit: Decimal
    credit: Decimal
    balance: Decimal


class LedgerResponse(BaseModel):
    """Ledger report response."""
    fiscal_year_id: UUID
    code_id: UUID
    code: str
    title: str
    nature: Optional[int] = None
    entries: List[LedgerEntry]
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal


# Balance Sheet Schemas
class BalanceSheetAccount(BaseModel):
    """A single code in balance sheet."""
    code_id: UUID
    code: str
    title: str
    balance: Decimal


class BalanceSheetSection(BaseModel):
    """A section in balance sheet (Assets, Liabilities, Equity)."""
    name: str
    category: AccountType
    total: Decimal
    accounts: List[BalanceSheetAccount]


class BalanceSheetResponse(BaseModel):
    """Balance Sheet report response."""
    fiscal_year_id: UUID
    as_of: date
    sections: List[BalanceSheetSection]
    assets: Decimal
    liabilities: Decimal
    equity: Decimal
    retained_earnings: Decimal
    liabilities_plus_equity: Decimal
    balanced: bool


# Profit & Loss Schemas
class PnLAccountRow(BaseModel):
    """A single revenue or expense code in P&L report."""
    code_id: UUID
    code: str
    title: str
    category: AccountType
    balance: Decimal


class PnLResponse(BaseModel):
    """Profit & Loss report response."""
    fiscal_year_id: UUID
    date_from: date
    date_to: date
    accounts: List[PnLAccountRow]
    revenue: Decimal
    expense: Decimal
    profit: Decimal
