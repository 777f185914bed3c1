"""Reporting API endpoints."""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.dependencies import get_app_settings, get_db
from app.domain.accounting.exceptions import ValidationError
from app.services.reporting_service import (
    get_trial_balance,
    get_ledger,
    get_balance_sheet,
    get_profit_and_loss,
)
from app.schemas.reporting import (
    TrialBalanceResponse,
    LedgerResponse,
    BalanceSheetResponse,
    PnLResponse,
)

router = APIRouter()


@router.get("/trial-balance", response_model=TrialBalanceResponse)
def get_trial_balance_report(
    fiscal_year_id: UUID = Query(..., description="Fiscal year UUID"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> TrialBalanceResponse:
    """
    Get Trial Balance report.

    Returns debit and credit sums per code over posted journals, with parent
    codes rolled up from their descendants.
    """
    result = get_trial_balance(db=db, fiscal_year_id=fiscal_year_id, settings=settings)
    return TrialBalanceResponse(**result)


@router.get("/ledger", response_model=LedgerResponse)
def get_ledger_report(
    fiscal_year_id: UUID = Query(..., description="Fiscal year UUID"),
    code_id: Optional[UUID] = Query(None, description="Code UUID"),
    account_id: Optional[UUID] = Query(None, description="Alias of code_id"),
    date_from: Optional[date] = Query(None, description="Start date"),
    date_to: Optional[date] = Query(None, description="End date"),
    db: Session = Depends(get_db),
) -> LedgerResponse:
    """
    Get the ledger of a code.

    Returns posted items of the code and its descendants in date and serial
    order with a running balance.
    """
    target = code_id or account_id
    if target is None:
        raise ValidationError("code_id or account_id is required")

    result = get_ledger(
        db=db,
        fiscal_year_id=fiscal_year_id,
        code_id=target,
        date_from=date_from,
        date_to=date_to,
    )
    return LedgerResponse(**result)


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
def get_balance_sheet_report(
    fiscal_year_id: UUID = Query(..., description="Fiscal year UUID"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> BalanceSheetResponse:
    """
    Get Balance Sheet report.

    Returns balance sheet data at the end of the fiscal year.
    """
    result = get_balance_sheet(db=db, fiscal_year_id=fiscal_year_id, settings=settings)
    return BalanceSheetResponse(**result)


@router.get("/profit-loss", response_model=PnLResponse)
def get_pnl_report(
    fiscal_year_id: UUID = Query(..., description="Fiscal year UUID"),
    db: Session = Depends(get_db),
) -> PnLResponse:
    """
    Get Profit & Loss report.

    Returns revenue, expense and profit of the fiscal year.
    """
    result = get_profit_and_loss(db=db, fiscal_year_id=fiscal_year_id)
    return PnLResponse(**result)
