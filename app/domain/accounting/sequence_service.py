"""Gap-free journal serial numbers."""

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.models.accounting import JournalSequence

logger = logging.getLogger(__name__)

JOURNAL_SERIAL = "journal_serial"


def ensure_sequence(db: Session, name: str = JOURNAL_SERIAL) -> None:
    """Create the counter row if it does not exist yet. Does not commit."""
    if db.get(JournalSequence, name) is None:
        db.add(JournalSequence(name=name, value=0))
        db.flush()


def next_serial(db: Session, name: str = JOURNAL_SERIAL) -> int:
    """
    Allocate the next serial number inside the caller's transaction.

    The counter row is incremented in place, which takes a row lock held
    until the transaction ends; concurrent posters queue on it. If the
    transaction rolls back the number is not consumed, so serials stay
    gap-free.
    """
    result = db.execute(
        update(JournalSequence)
        .where(JournalSequence.name == name)
        .values(value=JournalSequence.value + 1)
    )
    if result.rowcount == 0:
        ensure_sequence(db, name)
        db.execute(
            update(JournalSequence)
            .where(JournalSequence.name == name)
            .values(value=JournalSequence.value + 1)
        )

    value = db.execute(
        select(JournalSequence.value)
        .where(JournalSequence.name == name)
        .execution_options(populate_existing=True)
    ).scalar_one()

    logger.debug(f"Allocated {name} {value}")
    return value


def current_serial(db: Session, name: str = JOURNAL_SERIAL) -> int:
    value = db.execute(
        select(JournalSequence.value).where(JournalSequence.name == name)
    ).scalar_one_or_none()
    return value or 0
