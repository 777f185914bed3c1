"""Chart of codes schemas."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.accounting.enums import AccountType, CodeKind, CodeNature


class CodeCreate(BaseModel):
    """Schema for creating a code. kind is inferred from the digit count when omitted."""
    code: str = Field(..., min_length=1, max_length=32)
    title: str = Field(..., min_length=1, max_length=200)
    kind: Optional[CodeKind] = None
    parent_id: Optional[UUID] = None
    nature: Optional[CodeNature] = None
    category: Optional[AccountType] = None
    is_active: bool = True


class CodeUpdate(BaseModel):
    """Schema for patching a code. Only the fields sent are changed."""
    code: Optional[str] = Field(None, min_length=1, max_length=32)
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    kind: Optional[CodeKind] = None
    parent_id: Optional[UUID] = None
    nature: Optional[CodeNature] = None
    category: Optional[AccountType] = None
    is_active: Optional[bool] = None


class CodeResponse(BaseModel):
    """Schema for code response."""
    id: UUID
    code: str
    title: str
    kind: CodeKind
    parent_id: Optional[UUID] = None
    nature: Optional[int] = None
    category: Optional[AccountType] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CodeTreeNode(BaseModel):
    """A code with its children, as returned by the tree endpoint."""
    id: UUID
    code: str
    title: str
    kind: CodeKind
    parent_id: Optional[UUID] = None
    nature: Optional[int] = None
    category: Optional[AccountType] = None
    is_active: bool
    children: List["CodeTreeNode"] = Field(default_factory=list)


CodeTreeNode.model_rebuild()
