"""Journal ledger service: draft, update, delete, post and reverse journals."""

import logging
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.transaction import unit_of_work
from app.models.accounting import FiscalYear, Journal, JournalItem
from app.domain.accounting.enums import JournalStatus, SourceModule
from app.domain.accounting.exceptions import (
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from app.domain.accounting.fiscal_year_service import get_fiscal_year
from app.domain.accounting.posting_validator import (
    _field,
    to_amount,
    validate_journal_draft,
)
from app.domain.accounting.sequence_service import next_serial

logger = logging.getLogger(__name__)

JOURNAL_PATCH_FIELDS = ("date", "ref_no", "description", "items")


def get_journal(db: Session, journal_id: UUID) -> Journal:
    journal = db.get(Journal, journal_id)
    if journal is None:
        raise NotFoundError(f"Journal {journal_id} not found")
    return journal


def _get_journal_for_update(db: Session, journal_id: UUID) -> Journal:
    """Load a journal with a row lock so concurrent posts of it queue up."""
    journal = (
        db.query(Journal)
        .filter(Journal.id == journal_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if journal is None:
        raise NotFoundError(f"Journal {journal_id} not found")
    return journal


def list_journals(
    db: Session,
    fiscal_year_id: UUID | None = None,
    status: JournalStatus | None = None,
) -> List[Journal]:
    query = db.query(Journal)
    if fiscal_year_id is not None:
        query = query.filter(Journal.fiscal_year_id == fiscal_year_id)
    if status is not None:
        query = query.filter(Journal.status == JournalStatus(status))
    return query.order_by(Journal.date.desc(), Journal.serial_no.desc()).all()


def _require_open_year(fiscal_year: FiscalYear) -> None:
    if fiscal_year.is_closed:
        raise StateError(
            f"Fiscal year {fiscal_year.name} is closed",
            kind="fiscal_year_closed",
        )


def _require_in_period(fiscal_year: FiscalYear, entry_date: date) -> None:
    if not fiscal_year.contains(entry_date):
        raise ValidationError(
            f"Date {entry_date} is outside fiscal year {fiscal_year.name} "
            f"[{fiscal_year.start_date} .. {fiscal_year.end_date}]",
            kind="out_of_period",
        )


def _require_draft(journal: Journal, action: str) -> None:
    if journal.status != JournalStatus.DRAFT:
        raise StateError(f"Posted journal cannot be {action}", kind="journal_posted")


def _check_ref_no(
    db: Session,
    fiscal_year_id: UUID,
    ref_no: str | None,
    exclude_id: UUID | None = None,
) -> None:
    if not ref_no:
        return
    query = db.query(Journal.id).filter(
        Journal.fiscal_year_id == fiscal_year_id,
        Journal.ref_no == ref_no,
    )
    if exclude_id is not None:
        query = query.filter(Journal.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(
            f"Reference number {ref_no} is already used in this fiscal year",
            kind="duplicate_ref_no",
        )


def _build_items(lines: List[Any]) -> List[JournalItem]:
    return [
        JournalItem(
            position=position,
            code_id=_field(line, "code_id"),
            party_id=_field(line, "party_id"),
            debit=to_amount(_field(line, "debit")),
            credit=to_amount(_field(line, "credit")),
            description=_field(line, "description"),
        )
        for position, line in enumerate(lines)
    ]


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise ConflictError(f"Journal conflicts with stored data: {e.orig}") from e


@unit_of_work
def create_journal(
    db: Session,
    fiscal_year_id: UUID,
    entry_date: date,
    items: List[Any],
    ref_no: str | None = None,
    description: str | None = None,
    source_module: SourceModule = SourceModule.MANUAL,
    source_id: UUID | None = None,
    settings: Settings | None = None,
) -> Journal:
    """
    Create a draft journal with its items.

    Args:
        db: Database session
        fiscal_year_id: Fiscal year the journal belongs to
        entry_date: Journal date, must fall inside the fiscal year
        items: Lines with code_id, debit, credit and optional party_id,
            description
        ref_no: Optional reference, unique within the fiscal year
        description: Optional description
        source_module: Subsystem creating the journal
        source_id: Id of the record in that subsystem

    Returns:
        The draft Journal; it has no serial number until posted

    Raises:
        NotFoundError: Unknown fiscal year
        StateError: Fiscal year is closed
        ValidationError: Date outside the year, empty or unbalanced items,
            non-postable codes
        ConflictError: Duplicate ref_no
    """
    settings = settings or get_settings()

    fiscal_year = get_fiscal_year(db, fiscal_year_id)
    _require_open_year(fiscal_year)
    _require_in_period(fiscal_year, entry_date)
    total_debit, _ = validate_journal_draft(db, items, settings.balance_epsilon)
    _check_ref_no(db, fiscal_year.id, ref_no)

    journal = Journal(
        fiscal_year_id=fiscal_year.id,
        date=entry_date,
        ref_no=ref_no,
        description=description,
        status=JournalStatus.DRAFT,
        source_module=source_module,
        source_id=source_id,
    )
    journal.items = _build_items(items)
    db.add(journal)
    _commit(db)
    db.refresh(journal)

    logger.info(
        f"Created draft journal {journal.id} for {source_module.value} "
        f"source_id={source_id} with {len(items)} items, total {total_debit}"
    )
    return journal


@unit_of_work
def update_journal(
    db: Session,
    journal_id: UUID,
    patch: Dict[str, Any],
    settings: Settings | None = None,
) -> Journal:
    """
    Change a draft journal's header and, optionally, replace its items.

    Args:
        patch: Any of date, ref_no, description, items. When items is
            present it replaces every existing line.

    Raises:
        NotFoundError: Unknown journal
        StateError: Journal is posted, or its fiscal year is closed
        ValidationError: Merged journal is out of period, empty or unbalanced
        ConflictError: Duplicate ref_no
    """
    settings = settings or get_settings()
    unknown = set(patch) - set(JOURNAL_PATCH_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown journal fields: {sorted(unknown)}")

    journal = _get_journal_for_update(db, journal_id)
    _require_draft(journal, "modified")
    fiscal_year = get_fiscal_year(db, journal.fiscal_year_id)
    _require_open_year(fiscal_year)

    entry_date = patch.get("date") or journal.date
    _require_in_period(fiscal_year, entry_date)

    new_items = patch.get("items")
    lines = new_items if new_items is not None else list(journal.items)
    validate_journal_draft(db, lines, settings.balance_epsilon)

    ref_no = patch["ref_no"] if "ref_no" in patch else journal.ref_no
    _check_ref_no(db, fiscal_year.id, ref_no, exclude_id=journal.id)

    journal.date = entry_date
    journal.ref_no = ref_no
    if "description" in patch:
        journal.description = patch["description"]
    if new_items is not None:
        journal.items = _build_items(new_items)
    _commit(db)
    db.refresh(journal)

    logger.info(f"Updated draft journal {journal.id}")
    return journal


@unit_of_work
def delete_journal(db: Session, journal_id: UUID) -> None:
    """
    Delete a draft journal and its items.

    Raises:
        NotFoundError: Unknown journal
        StateError: Journal is posted
    """
    journal = _get_journal_for_update(db, journal_id)
    _require_draft(journal, "deleted")

    db.delete(journal)
    _commit(db)
    logger.info(f"Deleted draft journal {journal_id}")


@unit_of_work
def post_journal(
    db: Session,
    journal_id: UUID,
    settings: Settings | None = None,
) -> Journal:
    """
    Post a draft journal.

    Balance and targets are validated again, then the next serial number is
    allocated in the same transaction and the journal is frozen.

    Raises:
        NotFoundError: Unknown journal
        StateError: Journal is not a draft, or its fiscal year is closed
        ValidationError: Journal no longer validates
    """
    settings = settings or get_settings()

    journal = _get_journal_for_update(db, journal_id)
    if journal.status != JournalStatus.DRAFT:
        raise StateError("Only draft journals can be posted", kind="journal_posted")
    fiscal_year = get_fiscal_year(db, journal.fiscal_year_id)
    _require_open_year(fiscal_year)
    _require_in_period(fiscal_year, journal.date)
    validate_journal_draft(db, list(journal.items), settings.balance_epsilon)

    journal.serial_no = next_serial(db)
    journal.status = JournalStatus.POSTED
    journal.posted_at = datetime.utcnow()
    _commit(db)
    db.refresh(journal)

    logger.info(f"Posted journal {journal.id} as serial {journal.serial_no}")
    return journal


@unit_of_work
def reverse_journal(
    db: Session,
    journal_id: UUID,
    entry_date: date | None = None,
    description: str | None = None,
) -> Journal:
    """
    Reverse a posted journal.

    Creates and posts a new journal in the same fiscal year whose items swap
    debit and credit of every original item. The two journals are linked
    through reversal_of_id and reversed_by_id.

    Args:
        db: Database session
        journal_id: Posted journal to reverse
        entry_date: Date of the reversal, defaults to the original date
        description: Overrides "Reversal of <id>: <description>"

    Returns:
        The posted reversal Journal

    Raises:
        NotFoundError: Unknown journal
        StateError: Journal is not posted, is already reversed, or its
            fiscal year is closed
        ValidationError: entry_date is outside the fiscal year
    """
    source = _get_journal_for_update(db, journal_id)
    if source.status != JournalStatus.POSTED:
        raise StateError("Only posted journals can be reversed", kind="journal_not_posted")
    if source.reversed_by_id is not None:
        raise StateError(
            f"Journal {source.id} is already reversed by {source.reversed_by_id}",
            kind="journal_reversed",
        )
    fiscal_year = get_fiscal_year(db, source.fiscal_year_id)
    _require_open_year(fiscal_year)

    entry_date = entry_date or source.date
    _require_in_period(fiscal_year, entry_date)

    ref_no = f"REV-{source.ref_no}" if source.ref_no else f"REV-{str(source.id)[:8]}"
    _check_ref_no(db, fiscal_year.id, ref_no)

    if description is None:
        description = (
            f"Reversal of {source.id}: {source.description}"
            if source.description
            else f"Reversal of {source.id}"
        )

    reversal = Journal(
        id=uuid4(),
        fiscal_year_id=source.fiscal_year_id,
        date=entry_date,
        ref_no=ref_no,
        description=description,
        status=JournalStatus.POSTED,
        source_module=SourceModule.REVERSAL,
        source_id=source.id,
        reversal_of_id=source.id,
        posted_at=datetime.utcnow(),
    )
    reversal.items = [
        JournalItem(
            position=item.position,
            code_id=item.code_id,
            party_id=item.party_id,
            debit=Decimal(item.credit),
            credit=Decimal(item.debit),
            description=f"Reversal: {item.description}" if item.description else "Reversal",
        )
        for item in source.items
    ]

    reversal.serial_no = next_serial(db)
    db.add(reversal)
    db.flush()
    source.reversed_by_id = reversal.id
    _commit(db)
    db.refresh(reversal)

    logger.info(
        f"Reversed journal {source.id} (serial {source.serial_no}) "
        f"with {reversal.id} (serial {reversal.serial_no})"
    )
    return reversal
