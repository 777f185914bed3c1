"""Chart of codes API endpoints."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.db.dependencies import get_app_settings, get_db
from app.domain.accounting import code_service
from app.domain.accounting.enums import CodeKind
from app.schemas.codes import CodeCreate, CodeUpdate, CodeResponse, CodeTreeNode

router = APIRouter()


@router.post("", response_model=CodeResponse, status_code=status.HTTP_201_CREATED)
def create_code(
    data: CodeCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CodeResponse:
    """
    Create a code.

    The parent must be one tier up (group → general → specific) and, in
    strict prefix mode, the code must start with the parent's code.
    """
    code = code_service.create_or_update_code(
        db, data.model_dump(exclude_unset=True), settings=settings
    )
    return CodeResponse.model_validate(code)


@router.get("", response_model=List[CodeResponse])
def list_codes(
    kind: Optional[CodeKind] = Query(None, description="Filter by tier"),
    active_only: bool = Query(False, description="Only active codes"),
    db: Session = Depends(get_db),
) -> List[CodeResponse]:
    return [
        CodeResponse.model_validate(code)
        for code in code_service.list_codes(db, kind=kind, active_only=active_only)
    ]


@router.get("/tree", response_model=List[CodeTreeNode])
def get_code_tree(db: Session = Depends(get_db)) -> List[CodeTreeNode]:
    """Return the chart of codes as a nested tree, group codes at the top."""
    return [CodeTreeNode.model_validate(node) for node in code_service.get_code_tree(db)]


@router.get("/{code_id}", response_model=CodeResponse)
def get_code(
    code_id: UUID,
    db: Session = Depends(get_db),
) -> CodeResponse:
    return CodeResponse.model_validate(code_service.get_code(db, code_id))


@router.patch("/{code_id}", response_model=CodeResponse)
def update_code(
    code_id: UUID,
    data: CodeUpdate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CodeResponse:
    """Change the fields sent; the merged code is validated as a whole."""
    code = code_service.create_or_update_code(
        db, data.model_dump(exclude_unset=True), code_id=code_id, settings=settings
    )
    return CodeResponse.model_validate(code)


@router.delete("/{code_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_code(
    code_id: UUID,
    db: Session = Depends(get_db),
) -> Response:
    """Delete a code without children and journal items."""
    code_service.delete_code(db, code_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
