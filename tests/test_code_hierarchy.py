"""Tests for the chart of codes."""

import pytest
from uuid import uuid4

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.domain.accounting import code_service
from app.domain.accounting.enums import AccountType, CodeKind
from app.domain.accounting.exceptions import (
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)


def create(db: Session, **data):
    return code_service.create_or_update_code(db, data)


def test_kind_is_inferred_from_digit_count(db: Session, chart):
    """2 digits is a group, 4 a general code, longer a specific code."""
    assert chart["assets"].kind == CodeKind.GROUP
    assert chart["cash"].kind == CodeKind.GENERAL

    petty = create(db, code="100001", title="Petty cash", parent_id=chart["cash"].id)
    assert petty.kind == CodeKind.SPECIFIC


def test_unknown_tier_rejected(db: Session):
    with pytest.raises(ValidationError) as exc_info:
        create(db, code="123", title="Odd", category="asset")
    assert exc_info.value.kind == "invalid_code"


def test_non_numeric_code_rejected(db: Session):
    with pytest.raises(ValidationError):
        create(db, code="1A", title="Letters", category="asset")


@pytest.mark.parametrize(
    "data",
    [
        {"code": "10", "title": "Assets", "category": "bogus"},
        {"code": "10", "title": "Assets", "kind": "leaf", "category": "asset"},
    ],
)
def test_unknown_kind_or_category_rejected(db: Session, data):
    with pytest.raises(ValidationError) as exc_info:
        create(db, **data)
    assert exc_info.value.kind == "invalid_code"
    assert code_service.list_codes(db) == []


def test_group_requires_category(db: Session):
    with pytest.raises(ValidationError):
        create(db, code="20", title="Liabilities", nature=1)


def test_group_cannot_have_parent(db: Session, chart):
    with pytest.raises(ValidationError) as exc_info:
        create(db, code="20", title="Liabilities", category="liability", parent_id=chart["assets"].id)
    assert exc_info.value.kind == "invalid_parent"


def test_general_code_needs_group_parent(db: Session, chart):
    with pytest.raises(ValidationError) as exc_info:
        create(db, code="1100", title="Bank")
    assert exc_info.value.kind == "invalid_parent"


def test_specific_code_parent_must_be_general(db: Session, chart):
    with pytest.raises(ValidationError) as exc_info:
        create(db, code="100001", title="Petty cash", parent_id=chart["assets"].id)
    assert exc_info.value.kind == "invalid_parent"


def test_child_must_start_with_parent_code(db: Session, chart):
    with pytest.raises(ValidationError) as exc_info:
        create(db, code="2000", title="Payables", parent_id=chart["assets"].id)
    assert exc_info.value.kind == "invalid_parent"


def test_prefix_rule_can_be_relaxed(db: Session, chart, settings: Settings):
    relaxed = settings.model_copy(update={"code_strict_prefix": False})
    code = code_service.create_or_update_code(
        db,
        {"code": "2000", "title": "Payables", "parent_id": chart["assets"].id},
        settings=relaxed,
    )
    assert code.parent_id == chart["assets"].id


def test_unknown_parent(db: Session, chart):
    with pytest.raises(NotFoundError):
        create(db, code="1100", title="Bank", parent_id=uuid4())


def test_duplicate_code_rejected(db: Session, chart):
    with pytest.raises(ConflictError):
        create(db, code="1000", title="Cash again", parent_id=chart["assets"].id)


def test_update_changes_only_given_fields(db: Session, chart):
    updated = code_service.create_or_update_code(db, {"title": "Cash on hand"}, code_id=chart["cash"].id)

    assert updated.title == "Cash on hand"
    assert updated.code == "1000"
    assert updated.parent_id == chart["assets"].id


def test_renumbering_code_with_children_rejected(db: Session, chart):
    with pytest.raises(StateError):
        code_service.create_or_update_code(db, {"code": "11"}, code_id=chart["assets"].id)


def test_is_postable(db: Session, chart):
    cash = chart["cash"]
    assert not code_service.is_postable(db, chart["assets"].id)
    assert code_service.is_postable(db, cash.id)

    petty = create(db, code="100001", title="Petty cash", parent_id=cash.id)
    assert code_service.is_postable(db, petty.id)
    # A general code stops being a leaf once it has children
    assert not code_service.is_postable(db, cash.id)

    code_service.create_or_update_code(db, {"is_active": False}, code_id=petty.id)
    assert not code_service.is_postable(db, petty.id)


def test_resolve_ancestors_nearest_first(db: Session, chart):
    petty = create(db, code="100001", title="Petty cash", parent_id=chart["cash"].id)

    ancestors = list(code_service.resolve_ancestors(db, petty.id))

    assert [a.code for a in ancestors] == ["1000", "10"]


def test_category_and_nature_are_inherited(db: Session, chart):
    petty = create(db, code="100001", title="Petty cash", parent_id=chart["cash"].id)

    assert code_service.effective_category(db, petty) == AccountType.ASSET
    assert code_service.effective_nature(db, petty) == 0
    assert code_service.effective_nature(db, chart["sales"]) == 1


def test_descendant_ids(db: Session, chart):
    petty = create(db, code="100001", title="Petty cash", parent_id=chart["cash"].id)

    found = set(code_service.descendant_ids(db, chart["assets"].id))

    assert found == {chart["cash"].id, petty.id}


def test_code_tree(db: Session, chart):
    create(db, code="100001", title="Petty cash", parent_id=chart["cash"].id)

    tree = code_service.get_code_tree(db)

    assert [node["code"] for node in tree] == ["10", "40", "50"]
    assets = tree[0]
    assert [child["code"] for child in assets["children"]] == ["1000"]
    assert [child["code"] for child in assets["children"][0]["children"]] == ["100001"]


def test_delete_code(db: Session, chart):
    with pytest.raises(StateError):
        code_service.delete_code(db, chart["assets"].id)

    code_service.delete_code(db, chart["expense"].id)
    with pytest.raises(NotFoundError):
        code_service.get_code(db, chart["expense"].id)


def test_list_codes_by_kind(db: Session, chart):
    groups = code_service.list_codes(db, kind=CodeKind.GROUP)
    assert [c.code for c in groups] == ["10", "40", "50"]
