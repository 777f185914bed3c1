"""Journal API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.dependencies import get_app_settings, get_db
from app.domain.accounting import journal_service
from app.domain.accounting.enums import JournalStatus
from app.schemas.journals import (
    JournalCreate,
    JournalUpdate,
    JournalReverseRequest,
    JournalResponse,
)

router = APIRouter()


@router.post("", response_model=JournalResponse, status_code=status.HTTP_201_CREATED)
def create_journal(
    data: JournalCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> JournalResponse:
    """
    Create a draft journal with its items.

    The items must balance and target postable codes. The journal gets a
    serial number only when posted.
    """
    journal = journal_service.create_journal(
        db,
        fiscal_year_id=data.fiscal_year_id,
        entry_date=data.date,
        items=data.items,
        ref_no=data.ref_no,
        description=data.description,
        source_module=data.source_module,
        source_id=data.source_id,
        settings=settings,
    )
    return JournalResponse.model_validate(journal)


@router.get("", response_model=List[JournalResponse])
def list_journals(
    fiscal_year_id: Optional[UUID] = Query(None, description="Filter by fiscal year"),
    status: Optional[JournalStatus] = Query(None, description="draft or posted"),
    db: Session = Depends(get_db),
) -> List[JournalResponse]:
    journals = journal_service.list_journals(db, fiscal_year_id=fiscal_year_id, status=status)
    return [JournalResponse.model_validate(journal) for journal in journals]


@router.get("/{journal_id}", response_model=JournalResponse)
def get_journal(
    journal_id: UUID,
    db: Session = Depends(get_db),
) -> JournalResponse:
    return JournalResponse.model_validate(journal_service.get_journal(db, journal_id))


@router.patch("/{journal_id}", response_model=JournalResponse)
def update_journal(
    journal_id: UUID,
    data: JournalUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> JournalResponse:
    """Update a draft journal. Posted journals are rejected."""
    journal = journal_service.update_journal(
        db, journal_id, data.model_dump(exclude_unset=True), settings=settings
    )
    return JournalResponse.model_validate(journal)


@router.delete("/{journal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_journal(
    journal_id: UUID,
    db: Session = Depends(get_db),
) -> Response:
    """Delete a draft journal."""
    journal_service.delete_journal(db, journal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{journal_id}/post", response_model=JournalResponse)
def post_journal(
    journal_id: UUID,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> JournalResponse:
    """
    Post a draft journal.

    Assigns the next serial number and freezes the journal.
    """
    journal = journal_service.post_journal(db, journal_id, settings=settings)
    return JournalResponse.model_validate(journal)


@router.post("/{journal_id}/reverse", response_model=JournalResponse, status_code=status.HTTP_201_CREATED)
def reverse_journal(
    journal_id: UUID,
    data: Optional[JournalReverseRequest] = Body(None),
    db: Session = Depends(get_db),
) -> JournalResponse:
    """
    Reverse a posted journal.

    Returns the new, already posted journal whose items mirror the original
    with debit and credit swapped.
    """
    data = data or JournalReverseRequest()
    reversal = journal_service.reverse_journal(
        db,
        journal_id,
        entry_date=data.date,
        description=data.description,
    )
    return JournalResponse.model_validate(reversal)
