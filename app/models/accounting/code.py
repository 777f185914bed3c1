"""Chart of codes model."""

from typing import Optional
from uuid import uuid4, UUID
from sqlalchemy import String, Boolean, Integer, ForeignKey, Index, Uuid, CheckConstraint
from sqlalchemy.orm import mapped_column, Mapped, relationship

from app.models.base import Base, TimestampMixin, string_enum
from app.domain.accounting.enums import AccountType, CodeKind


class Code(TimestampMixin, Base):
    """A node of the group → general → specific chart of codes."""

    __tablename__ = "codes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)

    kind: Mapped[CodeKind] = mapped_column(string_enum(CodeKind), nullable=False)
    parent_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("codes.id", ondelete="RESTRICT"),
        nullable=True
    )

    # 0 = normally debit, 1 = normally credit
    nature: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category: Mapped[AccountType | None] = mapped_column(string_enum(AccountType), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    parent: Mapped[Optional["Code"]] = relationship(
        "Code",
        remote_side="Code.id",
        back_populates="children"
    )
    children: Mapped[list["Code"]] = relationship(
        "Code",
        back_populates="parent",
        order_by="Code.code"
    )

    __table_args__ = (
        Index("idx_codes_parent", "parent_id"),
        CheckConstraint("nature IS NULL OR nature IN (0, 1)", name="check_code_nature"),
    )

    def __repr__(self) -> str:
        return f"<Code {self.code} {self.kind.value}>"
