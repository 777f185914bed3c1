"""
Posting validation.

Checks the shape and balance of a set of journal lines before anything is
written. Lines may be dicts, pydantic models or JournalItem rows; each needs
``code_id``, ``debit`` and ``credit``.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Tuple

from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.domain.accounting.code_service import is_postable
from app.domain.accounting.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")
# Numeric(18, 2) leaves 16 integer digits
MAX_AMOUNT = Decimal("1E16")


def _field(line: Any, name: str) -> Any:
    if isinstance(line, dict):
        return line.get(name)
    return getattr(line, name, None)


def to_amount(value: Any) -> Decimal:
    """
    Convert an amount to Decimal without passing through binary floats.

    Amounts are stored with two decimal places, so anything finer than a
    cent is rejected rather than rounded.
    """
    if value is None or value == "":
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid amount {value!r}", kind="invalid_amount")

    if not amount.is_finite():
        raise ValidationError(f"Amount {value!r} is not a finite number", kind="invalid_amount")
    if abs(amount) >= MAX_AMOUNT:
        raise ValidationError(f"Amount {value!r} is too large", kind="invalid_amount")
    quantized = amount.quantize(CENT)
    if quantized != amount:
        raise ValidationError(f"Amount {value!r} has more than two decimal places", kind="invalid_amount")
    return quantized


def compute_totals(lines: Iterable[Any]) -> Tuple[Decimal, Decimal]:
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        total_debit += to_amount(_field(line, "debit"))
        total_credit += to_amount(_field(line, "credit"))
    return total_debit, total_credit


def validate_items(lines: List[Any], epsilon: Decimal | None = None) -> Tuple[Decimal, Decimal]:
    """
    Validate line amounts and balance.

    Returns:
        (total_debit, total_credit)

    Raises:
        ValidationError: kind "empty" when there are no lines, "invalid_amount"
            for a negative, two-sided or zero line, "unbalanced" when the
            totals differ by more than epsilon
    """
    if epsilon is None:
        epsilon = get_settings().balance_epsilon

    if not lines:
        raise ValidationError("Journal has no items", kind="empty")

    for index, line in enumerate(lines, start=1):
        debit = to_amount(_field(line, "debit"))
        credit = to_amount(_field(line, "credit"))
        if debit < ZERO or credit < ZERO:
            raise ValidationError(f"Item {index} has a negative amount", kind="invalid_amount")
        if debit > ZERO and credit > ZERO:
            raise ValidationError(f"Item {index} cannot have both debit and credit", kind="invalid_amount")
        if debit == ZERO and credit == ZERO:
            raise ValidationError(f"Item {index} has no amount", kind="invalid_amount")

    total_debit, total_credit = compute_totals(lines)
    if abs(total_debit - total_credit) > epsilon:
        raise ValidationError(
            f"Journal is not balanced: debits={total_debit}, credits={total_credit}",
            kind="unbalanced",
        )
    return total_debit, total_credit


def validate_journal_draft(
    db: Session,
    lines: List[Any],
    epsilon: Decimal | None = None,
) -> Tuple[Decimal, Decimal]:
    """
    Validate lines and check every target code is postable.

    Raises:
        ValidationError: As validate_items, plus kind "invalid_target" when a
            code is unknown, inactive, a group, or has children
    """
    totals = validate_items(lines, epsilon)

    for index, line in enumerate(lines, start=1):
        code_id = _field(line, "code_id")
        if code_id is None or not is_postable(db, code_id):
            raise ValidationError(
                f"Item {index} targets code {code_id}, which is not postable",
                kind="invalid_target",
            )
    return totals
