"""Chart of codes service: hierarchy maintenance and lookups."""

import logging
from typing import Any, Dict, Iterator, List
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.transaction import unit_of_work
from app.models.accounting import Code, JournalItem
from app.domain.accounting.enums import AccountType, CodeKind, CodeNature
from app.domain.accounting.exceptions import (
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Kind a parent must have for each child kind
PARENT_KIND = {
    CodeKind.GROUP: None,
    CodeKind.GENERAL: CodeKind.GROUP,
    CodeKind.SPECIFIC: CodeKind.GENERAL,
}

CODE_FIELDS = ("code", "title", "kind", "parent_id", "nature", "category", "is_active")


def infer_kind(code: str, settings: Settings | None = None) -> CodeKind:
    """
    Derive the tier of a code from its digit count.

    Raises:
        ValidationError: If the length matches no tier
    """
    settings = settings or get_settings()
    length = len(code)
    if length == settings.code_group_digits:
        return CodeKind.GROUP
    if length == settings.code_general_digits:
        return CodeKind.GENERAL
    if length > settings.code_general_digits:
        return CodeKind.SPECIFIC
    raise ValidationError(f"Code {code!r} has no tier for {length} digits", kind="invalid_code")


def get_code(db: Session, code_id: UUID) -> Code:
    code = db.get(Code, code_id)
    if code is None:
        raise NotFoundError(f"Code {code_id} not found")
    return code


def find_code(db: Session, code: str) -> Code | None:
    return db.query(Code).filter(Code.code == code).first()


def list_codes(
    db: Session,
    kind: CodeKind | None = None,
    active_only: bool = False,
) -> List[Code]:
    query = db.query(Code)
    if kind is not None:
        query = query.filter(Code.kind == kind)
    if active_only:
        query = query.filter(Code.is_active == True)  # noqa: E712
    return query.order_by(Code.code).all()


def _validate_code_state(
    db: Session,
    state: Dict[str, Any],
    settings: Settings,
    current: Code | None = None,
) -> None:
    code = state["code"]
    kind = state["kind"]

    if not code or not code.isdigit():
        raise ValidationError(f"Code {code!r} must contain digits only", kind="invalid_code")
    if not state["title"] or not state["title"].strip():
        raise ValidationError("Code title is required", kind="invalid_code")

    expected = infer_kind(code, settings)
    if expected != kind:
        raise ValidationError(
            f"Code {code} has {len(code)} digits, which is a {expected.value} code, not {kind.value}",
            kind="invalid_code",
        )

    nature = state["nature"]
    if nature is not None and nature not in (CodeNature.DEBIT, CodeNature.CREDIT):
        raise ValidationError(f"Nature must be 0 or 1, got {nature}", kind="invalid_code")

    parent_id = state["parent_id"]
    required_parent = PARENT_KIND[kind]
    if required_parent is None:
        if parent_id is not None:
            raise ValidationError("Group codes cannot have a parent", kind="invalid_parent")
        if state["category"] is None:
            raise ValidationError(f"Group code {code} needs a category", kind="invalid_code")
    else:
        if parent_id is None:
            raise ValidationError(
                f"A {kind.value} code needs a {required_parent.value} parent",
                kind="invalid_parent",
            )
        parent = db.get(Code, parent_id)
        if parent is None:
            raise NotFoundError(f"Parent code {parent_id} not found")
        if parent.kind != required_parent:
            raise ValidationError(
                f"Parent of a {kind.value} code must be a {required_parent.value} code, "
                f"got {parent.kind.value} {parent.code}",
                kind="invalid_parent",
            )
        if settings.code_strict_prefix and not code.startswith(parent.code):
            raise ValidationError(
                f"Code {code} must start with its parent code {parent.code}",
                kind="invalid_parent",
            )

    duplicate = db.query(Code).filter(Code.code == code)
    if current is not None:
        duplicate = duplicate.filter(Code.id != current.id)
    if duplicate.first() is not None:
        raise ConflictError(f"Code {code} already exists", kind="duplicate_code")

    if current is not None and current.children:
        if kind != current.kind:
            raise StateError(f"Cannot change the kind of code {current.code} while it has children")
        if code != current.code and settings.code_strict_prefix:
            raise StateError(f"Cannot renumber code {current.code} while it has children")


@unit_of_work
def create_or_update_code(
    db: Session,
    data: Dict[str, Any],
    code_id: UUID | None = None,
    settings: Settings | None = None,
) -> Code:
    """
    Create a code, or patch an existing one when code_id is given.

    Args:
        db: Database session
        data: Field values; on update only the keys present are changed.
            kind may be omitted and is then inferred from the digit count.
        code_id: Code to update, None to create
        settings: Tier digit counts and prefix rule

    Returns:
        The stored Code

    Raises:
        ValidationError: Bad code format, parent kind or prefix
        ConflictError: Duplicate code
        NotFoundError: Unknown code_id or parent_id
        StateError: Renumbering or re-tiering a code that has children
    """
    settings = settings or get_settings()
    unknown = set(data) - set(CODE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown code fields: {sorted(unknown)}", kind="invalid_code")

    current = get_code(db, code_id) if code_id is not None else None
    if current is not None:
        state = {field: getattr(current, field) for field in CODE_FIELDS}
    else:
        state = {
            "code": None,
            "title": None,
            "kind": None,
            "parent_id": None,
            "nature": None,
            "category": None,
            "is_active": True,
        }
    state.update(data)

    state["code"] = str(state["code"]).strip() if state["code"] is not None else ""
    if state["kind"] is None:
        state["kind"] = infer_kind(state["code"], settings)
    try:
        state["kind"] = CodeKind(state["kind"])
        if state["category"] is not None:
            state["category"] = AccountType(state["category"])
    except ValueError as exc:
        raise ValidationError(str(exc), kind="invalid_code") from exc
    if state["is_active"] is None:
        state["is_active"] = True

    _validate_code_state(db, state, settings, current)

    code = current if current is not None else Code()
    for field, value in state.items():
        setattr(code, field, value)
    if current is None:
        db.add(code)
    db.commit()
    db.refresh(code)

    logger.info(
        f"{'Updated' if current is not None else 'Created'} {code.kind.value} code {code.code} ({code.id})"
    )
    return code


@unit_of_work
def delete_code(db: Session, code_id: UUID) -> None:
    """
    Delete a code that has no children and no journal items.

    Raises:
        NotFoundError: Unknown code
        StateError: Code still has children or is used by journal items
    """
    code = get_code(db, code_id)
    if code.children:
        raise StateError(f"Code {code.code} has child codes and cannot be deleted")
    in_use = db.query(JournalItem.id).filter(JournalItem.code_id == code.id).first()
    if in_use is not None:
        raise StateError(f"Code {code.code} is used by journal items and cannot be deleted")

    db.delete(code)
    db.commit()
    logger.info(f"Deleted code {code.code} ({code_id})")


def resolve_ancestors(db: Session, code_id: UUID) -> Iterator[Code]:
    """Yield the ancestors of a code, nearest first, up to its group root."""
    code = get_code(db, code_id)
    seen = {code.id}
    parent_id = code.parent_id
    while parent_id is not None and parent_id not in seen:
        parent = db.get(Code, parent_id)
        if parent is None:
            return
        seen.add(parent.id)
        yield parent
        parent_id = parent.parent_id


def descendant_ids(db: Session, code_id: UUID) -> List[UUID]:
    """Return the ids of every code below code_id."""
    found: List[UUID] = []
    frontier = [code_id]
    while frontier:
        children = db.query(Code.id).filter(Code.parent_id.in_(frontier)).all()
        frontier = [row.id for row in children if row.id not in found]
        found.extend(frontier)
    return found


def has_children(db: Session, code_id: UUID) -> bool:
    return db.query(Code.id).filter(Code.parent_id == code_id).first() is not None


def is_postable(db: Session, code_id: UUID) -> bool:
    """
    True when journal items may target the code.

    A postable code is active, is not a group, and has no child codes.
    """
    code = db.get(Code, code_id)
    if code is None or not code.is_active:
        return False
    if code.kind == CodeKind.GROUP:
        return False
    return not has_children(db, code.id)


def effective_category(db: Session, code: Code) -> AccountType | None:
    """Nearest category set on the code or one of its ancestors."""
    if code.category is not None:
        return code.category
    for ancestor in resolve_ancestors(db, code.id):
        if ancestor.category is not None:
            return ancestor.category
    return None


def effective_nature(db: Session, code: Code) -> int | None:
    """Nearest nature set on the code or one of its ancestors."""
    if code.nature is not None:
        return code.nature
    for ancestor in resolve_ancestors(db, code.id):
        if ancestor.nature is not None:
            return ancestor.nature
    return None


def get_code_tree(db: Session) -> List[Dict[str, Any]]:
    """Build the group → general → specific tree as nested dicts."""
    rows = db.query(Code).order_by(Code.code).all()
    nodes = {
        row.id: {
            "id": row.id,
            "code": row.code,
            "title": row.title,
            "kind": row.kind,
            "parent_id": row.parent_id,
            "nature": row.nature,
            "category": row.category,
            "is_active": row.is_active,
            "children": [],
        }
        for row in rows
    }

    roots = []
    for row in rows:
        node = nodes[row.id]
        if row.parent_id is not None and row.parent_id in nodes:
            nodes[row.parent_id]["children"].append(node)
        else:
            roots.append(node)
    return roots
