"""Fiscal year schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FiscalYearCreate(BaseModel):
    """Schema for creating a fiscal year."""
    name: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date


class FiscalYearUpdate(BaseModel):
    """Schema for renaming or moving an open fiscal year."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class OpenNextRequest(BaseModel):
    """Optional overrides for the successor fiscal year."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    end_date: Optional[date] = None


class FiscalYearResponse(BaseModel):
    """Schema for fiscal year response."""
    id: UUID
    name: str
    start_date: date
    end_date: date
    is_closed: bool
    created_at: datetime

    class Config:
        from_attributes = True
