"""Fiscal year lifecycle: create, update, close, open next."""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.orm import Session

from app.db.transaction import unit_of_work
from app.models.accounting import FiscalYear, Journal
from app.domain.accounting.exceptions import (
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _check_range(start_date: date, end_date: date) -> None:
    if start_date >= end_date:
        raise ValidationError(
            f"Fiscal year start {start_date} must be before end {end_date}",
            kind="invalid_range",
        )


def get_fiscal_year(db: Session, fiscal_year_id: UUID) -> FiscalYear:
    fiscal_year = db.get(FiscalYear, fiscal_year_id)
    if fiscal_year is None:
        raise NotFoundError(f"Fiscal year {fiscal_year_id} not found")
    return fiscal_year


def list_fiscal_years(db: Session) -> List[FiscalYear]:
    return db.query(FiscalYear).order_by(FiscalYear.start_date.desc()).all()


@unit_of_work
def create_fiscal_year(
    db: Session,
    name: str,
    start_date: date,
    end_date: date,
) -> FiscalYear:
    """
    Create an open fiscal year.

    Raises:
        ValidationError: If start_date is not before end_date
    """
    _check_range(start_date, end_date)

    fiscal_year = FiscalYear(
        name=name,
        start_date=start_date,
        end_date=end_date,
        is_closed=False,
    )
    db.add(fiscal_year)
    db.commit()
    db.refresh(fiscal_year)

    logger.info(f"Created fiscal year {fiscal_year.name} [{start_date} .. {end_date}] ({fiscal_year.id})")
    return fiscal_year


@unit_of_work
def update_fiscal_year(
    db: Session,
    fiscal_year_id: UUID,
    patch: Dict[str, Any],
) -> FiscalYear:
    """
    Rename an open fiscal year or move its dates.

    Raises:
        NotFoundError: Unknown fiscal year
        StateError: The year is closed
        ValidationError: The resulting range is empty
    """
    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    if fiscal_year.is_closed:
        raise StateError(f"Fiscal year {fiscal_year.name} is closed and cannot be modified")

    name = patch.get("name") or fiscal_year.name
    start_date = patch.get("start_date") or fiscal_year.start_date
    end_date = patch.get("end_date") or fiscal_year.end_date
    _check_range(start_date, end_date)

    stranded = (
        db.query(Journal.id)
        .filter(
            Journal.fiscal_year_id == fiscal_year.id,
            (Journal.date < start_date) | (Journal.date > end_date),
        )
        .first()
    )
    if stranded is not None:
        raise ValidationError(
            f"Journals of fiscal year {fiscal_year.name} fall outside [{start_date} .. {end_date}]",
            kind="invalid_range",
        )

    fiscal_year.name = name
    fiscal_year.start_date = start_date
    fiscal_year.end_date = end_date
    db.commit()
    db.refresh(fiscal_year)

    logger.info(f"Updated fiscal year {fiscal_year.id}")
    return fiscal_year


@unit_of_work
def close_fiscal_year(db: Session, fiscal_year_id: UUID) -> FiscalYear:
    """
    Close a fiscal year.

    Closing a year that is already closed changes nothing and returns it.
    """
    fiscal_year = get_fiscal_year(db, fiscal_year_id)

    if fiscal_year.is_closed:
        logger.warning(f"Fiscal year {fiscal_year_id} is already closed")
        return fiscal_year

    fiscal_year.is_closed = True
    db.commit()
    db.refresh(fiscal_year)

    logger.info(f"Closed fiscal year {fiscal_year.name} ({fiscal_year.id})")
    return fiscal_year


def next_period(fiscal_year: FiscalYear) -> tuple[date, date]:
    """Successor span: starts the day after end, same length as the current year."""
    span = fiscal_year.end_date - fiscal_year.start_date
    next_start = fiscal_year.end_date + timedelta(days=1)
    return next_start, next_start + span


@unit_of_work
def open_next_fiscal_year(
    db: Session,
    fiscal_year_id: UUID,
    name: str | None = None,
    end_date: date | None = None,
) -> FiscalYear:
    """
    Open the fiscal year that follows a closed one.

    Args:
        db: Database session
        fiscal_year_id: The closed year
        name: Name of the new year, defaults to "<name> (Next)"
        end_date: Overrides the mirrored end date

    Returns:
        The new, open FiscalYear

    Raises:
        NotFoundError: Unknown fiscal year
        StateError: The year is still open
        ConflictError: A year already starts on the successor start date
        ValidationError: end_date is not after the successor start date
    """
    current = get_fiscal_year(db, fiscal_year_id)
    if not current.is_closed:
        raise StateError("Fiscal year must be closed before opening next", kind="fiscal_year_open")

    next_start, next_end = next_period(current)
    if end_date is not None:
        next_end = end_date
    _check_range(next_start, next_end)

    existing = db.query(FiscalYear).filter(FiscalYear.start_date == next_start).first()
    if existing is not None:
        raise ConflictError(
            f"Fiscal year {existing.name} already starts on {next_start}",
            kind="next_fiscal_year_exists",
        )

    successor = FiscalYear(
        name=name or f"{current.name} (Next)",
        start_date=next_start,
        end_date=next_end,
        is_closed=False,
    )
    db.add(successor)
    db.commit()
    db.refresh(successor)

    logger.info(
        f"Opened fiscal year {successor.name} [{next_start} .. {next_end}] after {current.name}"
    )
    return successor
