"""Reporting service for generating accounting reports."""

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Any, Optional
from uuid import UUID

from sqlalchemy.orm import Query, Session
from sqlalchemy import func

from app.core.config import Settings, get_settings
from app.models.accounting import Code, FiscalYear, Journal, JournalItem
from app.domain.accounting.enums import AccountType, CodeNature, JournalStatus
from app.domain.accounting.exceptions import ValidationError
from app.domain.accounting.code_service import (
    descendant_ids,
    effective_category,
    effective_nature,
    get_code,
    resolve_ancestors,
)
from app.domain.accounting.fiscal_year_service import get_fiscal_year

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")

# Categories whose balance is credit - debit
CREDIT_CATEGORIES = (AccountType.LIABILITY, AccountType.EQUITY, AccountType.REVENUE)

BALANCE_SHEET_SECTIONS = (
    (AccountType.ASSET, "Assets"),
    (AccountType.LIABILITY, "Liabilities"),
    (AccountType.EQUITY, "Equity"),
)


def _amount(value: Any) -> Decimal:
    return Decimal(str(value or 0))


def _posted_in_year(query: Query, fiscal_year: FiscalYear) -> Query:
    """Restrict a query joined to Journal to posted journals dated inside the year."""
    return query.filter(
        Journal.fiscal_year_id == fiscal_year.id,
        Journal.status == JournalStatus.POSTED,
        Journal.date >= fiscal_year.start_date,
        Journal.date <= fiscal_year.end_date,
    )


def _code_sums(db: Session, fiscal_year: FiscalYear) -> Dict[UUID, Dict[str, Decimal]]:
    """Debit and credit sums of posted items per code they target."""
    query = (
        db.query(
            JournalItem.code_id,
            func.sum(JournalItem.debit).label("debit"),
            func.sum(JournalItem.credit).label("credit"),
        )
        .join(Journal, Journal.id == JournalItem.journal_id)
    )
    query = _posted_in_year(query, fiscal_year).group_by(JournalItem.code_id)

    return {
        row.code_id: {"debit": _amount(row.debit), "credit": _amount(row.credit)}
        for row in query.all()
    }


def get_trial_balance(
    db: Session,
    fiscal_year_id: UUID,
    settings: Settings | None = None,
) -> Dict[str, Any]:
    """
    Generate Trial Balance report.

    Every code with posted items appears with its own sums; every ancestor of
    such a code appears with the rollup of its descendants.

    Args:
        db: Database session
        fiscal_year_id: Fiscal year UUID

    Returns:
        Dict with rows ordered by code, grand totals and a balanced flag
    """
    settings = settings or get_settings()
    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    leaf_sums = _code_sums(db, fiscal_year)

    rollup: Dict[UUID, Dict[str, Decimal]] = {}
    codes: Dict[UUID, Code] = {}
    for code_id, sums in leaf_sums.items():
        code = get_code(db, code_id)
        for node in [code, *resolve_ancestors(db, code_id)]:
            codes[node.id] = node
            totals = rollup.setdefault(node.id, {"debit": ZERO, "credit": ZERO})
            totals["debit"] += sums["debit"]
            totals["credit"] += sums["credit"]

    rows = []
    for code_id, sums in rollup.items():
        code = codes[code_id]
        rows.append({
            "code_id": code.id,
            "code": code.code,
            "title": code.title,
            "kind": code.kind,
            "debit": sums["debit"],
            "credit": sums["credit"],
        })
    rows.sort(key=lambda row: row["code"])

    # Grand totals come from the direct sums only, so rollups are not counted twice
    total_debit = sum((sums["debit"] for sums in leaf_sums.values()), ZERO)
    total_credit = sum((sums["credit"] for sums in leaf_sums.values()), ZERO)
    balanced = abs(total_debit - total_credit) <= settings.balance_epsilon
    if not balanced:
        logger.error(
            f"Trial balance of fiscal year {fiscal_year.id} is off: "
            f"debit={total_debit}, credit={total_credit}"
        )

    return {
        "fiscal_year_id": fiscal_year.id,
        "rows": rows,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "balanced": balanced,
    }


def get_ledger(
    db: Session,
    fiscal_year_id: UUID,
    code_id: UUID,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Generate the ledger of one code.

    Items of the code and all of its descendants, ordered by journal date
    then serial number, each with the running balance. Credit-normal codes
    accumulate credit - debit, all others debit - credit.

    Args:
        db: Database session
        fiscal_year_id: Fiscal year UUID
        code_id: Code UUID
        date_from: Optional first date, inclusive
        date_to: Optional last date, inclusive

    Returns:
        Dict with code details, entries and closing balance
    """
    if date_from and date_to and date_from > date_to:
        raise ValidationError(f"date_from {date_from} is after date_to {date_to}", kind="invalid_range")

    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    code = get_code(db, code_id)
    nature = effective_nature(db, code)
    credit_normal = nature == CodeNature.CREDIT

    code_ids = [code.id, *descendant_ids(db, code.id)]

    query = (
        db.query(
            Journal.id.label("journal_id"),
            Journal.serial_no,
            Journal.date,
            Journal.ref_no,
            Journal.description.label("journal_description"),
            JournalItem.code_id,
            Code.code,
            JournalItem.party_id,
            JournalItem.description,
            JournalItem.debit,
            JournalItem.credit,
        )
        .select_from(JournalItem)
        .join(Journal, Journal.id == JournalItem.journal_id)
        .join(Code, Code.id == JournalItem.code_id)
        .filter(JournalItem.code_id.in_(code_ids))
    )
    query = _posted_in_year(query, fiscal_year)
    if date_from:
        query = query.filter(Journal.date >= date_from)
    if date_to:
        query = query.filter(Journal.date <= date_to)
    query = query.order_by(Journal.date, Journal.serial_no, JournalItem.position)

    entries = []
    balance = ZERO
    total_debit = ZERO
    total_credit = ZERO
    for row in query.all():
        debit = _amount(row.debit)
        credit = _amount(row.credit)
        total_debit += debit
        total_credit += credit
        balance += (credit - debit) if credit_normal else (debit - credit)

        entries.append({
            "journal_id": row.journal_id,
            "serial_no": row.serial_no,
            "date": row.date,
            "ref_no": row.ref_no,
            "description": row.description or row.journal_description,
            "code_id": row.code_id,
            "code": row.code,
            "party_id": row.party_id,
            "debit": debit,
            "credit": credit,
            "balance": balance,
        })

    return {
        "fiscal_year_id": fiscal_year.id,
        "code_id": code.id,
        "code": code.code,
        "title": code.title,
        "nature": nature,
        "entries": entries,
        "total_debit": total_debit,
        "total_credit": total_credit,
        "closing_balance": balance,
    }


def _category_balances(db: Session, fiscal_year: FiscalYear) -> List[Dict[str, Any]]:
    """Signed balance of every code with posted items, tagged with its effective category."""
    accounts = []
    for code_id, sums in _code_sums(db, fiscal_year).items():
        code = get_code(db, code_id)
        category = effective_category(db, code)
        if category is None:
            logger.warning(f"Code {code.code} has no category and is left out of statements")
            continue

        if category in CREDIT_CATEGORIES:
            balance = sums["credit"] - sums["debit"]
        else:
            balance = sums["debit"] - sums["credit"]

        accounts.append({
            "code_id": code.id,
            "code": code.code,
            "title": code.title,
            "category": category,
            "balance": balance,
        })
    accounts.sort(key=lambda account: account["code"])
    return accounts


def get_balance_sheet(
    db: Session,
    fiscal_year_id: UUID,
    settings: Settings | None = None,
) -> Dict[str, Any]:
    """
    Generate Balance Sheet report.

    Revenue and expense codes are not listed; their net is carried as
    retained earnings on the liabilities and equity side.

    Args:
        db: Database session
        fiscal_year_id: Fiscal year UUID

    Returns:
        Dict with sections (Assets, Liabilities, Equity), totals and a
        balanced flag for assets == liabilities + equity + retained earnings
    """
    settings = settings or get_settings()
    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    accounts = _category_balances(db, fiscal_year)

    totals = {category: ZERO for category in AccountType}
    for account in accounts:
        totals[account["category"]] += account["balance"]

    sections = []
    for category, name in BALANCE_SHEET_SECTIONS:
        section_accounts = [
            {key: account[key] for key in ("code_id", "code", "title", "balance")}
            for account in accounts
            if account["category"] == category and account["balance"] != 0
        ]
        sections.append({
            "name": name,
            "category": category,
            "total": totals[category],
            "accounts": section_accounts,
        })

    retained_earnings = totals[AccountType.REVENUE] - totals[AccountType.EXPENSE]
    liabilities_plus_equity = (
        totals[AccountType.LIABILITY] + totals[AccountType.EQUITY] + retained_earnings
    )
    balanced = abs(totals[AccountType.ASSET] - liabilities_plus_equity) <= settings.balance_epsilon
    if not balanced:
        logger.error(
            f"Balance sheet of fiscal year {fiscal_year.id} does not balance: "
            f"assets={totals[AccountType.ASSET]}, liabilities+equity={liabilities_plus_equity}"
        )

    return {
        "fiscal_year_id": fiscal_year.id,
        "as_of": fiscal_year.end_date,
        "sections": sections,
        "assets": totals[AccountType.ASSET],
        "liabilities": totals[AccountType.LIABILITY],
        "equity": totals[AccountType.EQUITY],
        "retained_earnings": retained_earnings,
        "liabilities_plus_equity": liabilities_plus_equity,
        "balanced": balanced,
    }


def get_profit_and_loss(db: Session, fiscal_year_id: UUID) -> Dict[str, Any]:
    """
    Generate Profit & Loss report.

    Args:
        db: Database session
        fiscal_year_id: Fiscal year UUID

    Returns:
        Dict with revenue and expense rows and revenue, expense, profit totals
    """
    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    accounts = [
        account
        for account in _category_balances(db, fiscal_year)
        if account["category"] in (AccountType.REVENUE, AccountType.EXPENSE)
    ]

    total_revenue = sum(
        (a["balance"] for a in accounts if a["category"] == AccountType.REVENUE), ZERO
    )
    total_expense = sum(
        (a["balance"] for a in accounts if a["category"] == AccountType.EXPENSE), ZERO
    )

    return {
        "fiscal_year_id": fiscal_year.id,
        "date_from": fiscal_year.start_date,
        "date_to": fiscal_year.end_date,
        "accounts": accounts,
        "revenue": total_revenue,
        "expense": total_expense,
        "profit": total_revenue - total_expense,
    }
