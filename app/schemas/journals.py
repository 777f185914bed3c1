"""Journal schemas."""

from datetime import date as calendar_date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.accounting.enums import JournalStatus, SourceModule


class JournalItemCreate(BaseModel):
    """One line of a journal. Exactly one of debit and credit is non-zero."""
    code_id: UUID
    party_id: Optional[UUID] = None
    debit: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    credit: Decimal = Field(default=Decimal("0.00"), ge=0, decimal_places=2)
    description: Optional[str] = Field(None, max_length=500)


class JournalItemResponse(BaseModel):
    """Schema for journal item response."""
    id: UUID
    position: int
    code_id: UUID
    party_id: Optional[UUID] = None
    debit: Decimal
    credit: Decimal
    description: Optional[str] = None

    class Config:
        from_attributes = True


class JournalCreate(BaseModel):
    """Schema for creating a draft journal."""
    fiscal_year_id: UUID
    date: calendar_date
    ref_no: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    source_module: SourceModule = SourceModule.MANUAL
    source_id: Optional[UUID] = None
    items: List[JournalItemCreate] = Field(default_factory=list)


class JournalUpdate(BaseModel):
    """Schema for patching a draft journal. items, when sent, replaces all lines."""
    date: Optional[calendar_date] = None
    ref_no: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    items: Optional[List[JournalItemCreate]] = None


class JournalReverseRequest(BaseModel):
    """Optional date and description of a reversal."""
    date: Optional[calendar_date] = None
    description: Optional[str] = Field(None, max_length=500)


class JournalResponse(BaseModel):
    """Schema for journal response."""
    id: UUID
    fiscal_year_id: UUID
    ref_no: Optional[str] = None
    serial_no: Optional[int] = None
    date: calendar_date
    description: Optional[str] = None
    status: JournalStatus
    source_module: SourceModule
    source_id: Optional[UUID] = None
    reversal_of_id: Optional[UUID] = None
    reversed_by_id: Optional[UUID] = None
    posted_at: Optional[datetime] = None
    total_debit: Decimal
    total_credit: Decimal
    items: List[JournalItemResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
