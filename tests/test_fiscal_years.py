"""Tests for the fiscal year lifecycle."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from app.domain.accounting import fiscal_year_service, journal_service
from app.domain.accounting.exceptions import (
    ConflictError,
    StateError,
    ValidationError,
)


def test_create_requires_start_before_end(db: Session):
    with pytest.raises(ValidationError):
        fiscal_year_service.create_fiscal_year(db, "Empty", date(2031, 1, 1), date(2031, 1, 1))

    with pytest.raises(ValidationError):
        fiscal_year_service.create_fiscal_year(db, "Backwards", date(2031, 12, 31), date(2031, 1, 1))


def test_created_year_is_open(db: Session, fiscal_year):
    assert fiscal_year.is_closed is False
    assert fiscal_year.contains(date(2031, 4, 1))
    assert fiscal_year.contains(date(2032, 3, 20))
    assert not fiscal_year.contains(date(2032, 3, 21))


def test_open_next_requires_closed_year(db: Session, fiscal_year):
    with pytest.raises(StateError) as exc_info:
        fiscal_year_service.open_next_fiscal_year(db, fiscal_year.id)
    assert exc_info.value.kind == "fiscal_year_open"
    assert "must be closed before opening next" in exc_info.value.message


def test_open_next_starts_day_after_end(db: Session):
    current = fiscal_year_service.create_fiscal_year(
        db, "1410", date(2031, 3, 21), date(2032, 3, 20)
    )
    fiscal_year_service.close_fiscal_year(db, current.id)

    successor = fiscal_year_service.open_next_fiscal_year(db, current.id)

    assert successor.start_date == date(2032, 3, 21)
    assert successor.end_date - successor.start_date == current.end_date - current.start_date
    assert successor.is_closed is False
    assert successor.name == "1410 (Next)"


def test_open_next_overrides(db: Session, fiscal_year):
    fiscal_year_service.close_fiscal_year(db, fiscal_year.id)

    successor = fiscal_year_service.open_next_fiscal_year(
        db, fiscal_year.id, name="FY 2032", end_date=date(2032, 12, 31)
    )

    assert successor.name == "FY 2032"
    assert successor.start_date == fiscal_year.end_date + timedelta(days=1)
    assert successor.end_date == date(2032, 12, 31)


def test_open_next_only_once(db: Session, fiscal_year):
    fiscal_year_service.close_fiscal_year(db, fiscal_year.id)
    fiscal_year_service.open_next_fiscal_year(db, fiscal_year.id)

    with pytest.raises(ConflictError):
        fiscal_year_service.open_next_fiscal_year(db, fiscal_year.id)


def test_close_twice_is_noop(db: Session, fiscal_year):
    first = fiscal_year_service.close_fiscal_year(db, fiscal_year.id)
    second = fiscal_year_service.close_fiscal_year(db, fiscal_year.id)

    assert first.is_closed is True
    assert second.is_closed is True
    assert second.id == first.id


def test_update_open_year(db: Session, fiscal_year):
    updated = fiscal_year_service.update_fiscal_year(
        db, fiscal_year.id, {"name": "FY 31/32", "end_date": date(2032, 3, 31)}
    )

    assert updated.name == "FY 31/32"
    assert updated.start_date == date(2031, 4, 1)
    assert updated.end_date == date(2032, 3, 31)


def test_update_closed_year_rejected(db: Session, fiscal_year):
    fiscal_year_service.close_fiscal_year(db, fiscal_year.id)

    with pytest.raises(StateError):
        fiscal_year_service.update_fiscal_year(db, fiscal_year.id, {"name": "Renamed"})


def test_update_cannot_strand_journals(db: Session, chart, fiscal_year):
    journal_service.create_journal(
        db,
        fiscal_year.id,
        date(2032, 3, 1),
        [
            {"code_id": chart["cash"].id, "debit": Decimal("10")},
            {"code_id": chart["sales"].id, "credit": Decimal("10")},
        ],
    )

    with pytest.raises(ValidationError):
        fiscal_year_service.update_fiscal_year(db, fiscal_year.id, {"end_date": date(2031, 12, 31)})

    assert fiscal_year_service.get_fiscal_year(db, fiscal_year.id).end_date == date(2032, 3, 20)


def test_list_most_recent_first(db: Session, fiscal_year):
    fiscal_year_service.close_fiscal_year(db, fiscal_year.id)
    successor = fiscal_year_service.open_next_fiscal_year(db, fiscal_year.id)

    years = fiscal_year_service.list_fiscal_years(db)

    assert [fy.id for fy in years] == [successor.id, fiscal_year.id]
