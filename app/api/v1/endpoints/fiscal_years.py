"""Fiscal year API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.domain.accounting import fiscal_year_service
from app.schemas.fiscal_years import (
    FiscalYearCreate,
    FiscalYearUpdate,
    FiscalYearResponse,
    OpenNextRequest,
)

router = APIRouter()


@router.post("", response_model=FiscalYearResponse, status_code=status.HTTP_201_CREATED)
def create_fiscal_year(
    data: FiscalYearCreate,
    db: Session = Depends(get_db),
) -> FiscalYearResponse:
    """Create an open fiscal year."""
    fiscal_year = fiscal_year_service.create_fiscal_year(
        db,
        name=data.name,
        start_date=data.start_date,
        end_date=data.end_date,
    )
    return FiscalYearResponse.model_validate(fiscal_year)


@router.get("", response_model=List[FiscalYearResponse])
def list_fiscal_years(db: Session = Depends(get_db)) -> List[FiscalYearResponse]:
    """List fiscal years, most recent first."""
    return [
        FiscalYearResponse.model_validate(fy)
        for fy in fiscal_year_service.list_fiscal_years(db)
    ]


@router.get("/{fiscal_year_id}", response_model=FiscalYearResponse)
def get_fiscal_year(
    fiscal_year_id: UUID,
    db: Session = Depends(get_db),
) -> FiscalYearResponse:
    return FiscalYearResponse.model_validate(
        fiscal_year_service.get_fiscal_year(db, fiscal_year_id)
    )


@router.patch("/{fiscal_year_id}", response_model=FiscalYearResponse)
def update_fiscal_year(
    fiscal_year_id: UUID,
    data: FiscalYearUpdate,
    db: Session = Depends(get_db),
) -> FiscalYearResponse:
    """Rename an open fiscal year or move its dates."""
    fiscal_year = fiscal_year_service.update_fiscal_year(
        db, fiscal_year_id, data.model_dump(exclude_unset=True)
    )
    return FiscalYearResponse.model_validate(fiscal_year)


@router.post("/{fiscal_year_id}/close", response_model=FiscalYearResponse)
def close_fiscal_year(
    fiscal_year_id: UUID,
    db: Session = Depends(get_db),
) -> FiscalYearResponse:
    """
    Close a fiscal year.

    Closing an already closed year returns it unchanged.
    """
    fiscal_year = fiscal_year_service.close_fiscal_year(db, fiscal_year_id)
    return FiscalYearResponse.model_validate(fiscal_year)


@router.post(
    "/{fiscal_year_id}/open-next",
    response_model=FiscalYearResponse,
    status_code=status.HTTP_201_CREATED,
)
def open_next_fiscal_year(
    fiscal_year_id: UUID,
    data: Optional[OpenNextRequest] = Body(None),
    db: Session = Depends(get_db),
) -> FiscalYearResponse:
    """
    Open the fiscal year following a closed one.

    The successor starts the day after the closed year ends and has the
    same length unless end_date is given.
    """
    data = data or OpenNextRequest()
    successor = fiscal_year_service.open_next_fiscal_year(
        db,
        fiscal_year_id,
        name=data.name,
        end_date=data.end_date,
    )
    return FiscalYearResponse.model_validate(successor)
