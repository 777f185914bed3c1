"""Journal, journal item and serial counter models."""

from datetime import datetime, date as calendar_date
from decimal import Decimal
from typing import Optional
from uuid import uuid4, UUID
from sqlalchemy import (
    String, Date, DateTime, BigInteger, ForeignKey, Numeric, CheckConstraint, Index, Uuid,
)
from sqlalchemy.orm import mapped_column, Mapped, relationship

from app.models.base import Base, TimestampMixin, string_enum
from app.domain.accounting.enums import SourceModule, JournalStatus


class Journal(TimestampMixin, Base):
    """A balanced accounting document."""

    __tablename__ = "journals"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    fiscal_year_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("fiscal_years.id"),
        nullable=False
    )

    ref_no: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Assigned on posting only
    serial_no: Mapped[int | None] = mapped_column(BigInteger, nullable=True, unique=True)

    date: Mapped[calendar_date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[JournalStatus] = mapped_column(
        string_enum(JournalStatus),
        default=JournalStatus.DRAFT,
        nullable=False
    )

    source_module: Mapped[SourceModule] = mapped_column(
        string_enum(SourceModule),
        default=SourceModule.MANUAL,
        nullable=False
    )
    source_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)

    # Reversal linkage
    reversal_of_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("journals.id"),
        nullable=True
    )
    reversed_by_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("journals.id"),
        nullable=True
    )

    posted_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    # Relationships
    items: Mapped[list["JournalItem"]] = relationship(
        "JournalItem",
        back_populates="journal",
        cascade="all, delete-orphan",
        order_by="JournalItem.position"
    )
    fiscal_year: Mapped[Optional["FiscalYear"]] = relationship("FiscalYear")

    __table_args__ = (
        Index("idx_journals_fiscal_year_date", "fiscal_year_id", "date"),
        Index(
            "uniq_journals_fiscal_ref",
            "fiscal_year_id",
            "ref_no",
            unique=True,
        ),
    )

    @property
    def is_reversed(self) -> bool:
        return self.reversed_by_id is not None

    @property
    def total_debit(self) -> Decimal:
        return sum((Decimal(item.debit) for item in self.items), Decimal("0"))

    @property
    def total_credit(self) -> Decimal:
        return sum((Decimal(item.credit) for item in self.items), Decimal("0"))


class JournalItem(Base):
    """A debit or credit line of a journal."""

    __tablename__ = "journal_items"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    journal_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("journals.id", ondelete="CASCADE"),
        nullable=False
    )

    # Relationship
    journal: Mapped[Journal] = relationship("Journal", back_populates="items")

    position: Mapped[int] = mapped_column(default=0, nullable=False)

    code_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("codes.id", ondelete="RESTRICT"),
        nullable=False
    )
    code: Mapped["Code"] = relationship("Code")

    party_id: Mapped[UUID | None] = mapped_column(Uuid, nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)

    debit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"), nullable=False)
    credit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0"), nullable=False)

    __table_args__ = (
        Index("idx_journal_items_code", "code_id"),
        CheckConstraint("debit >= 0", name="check_debit_non_negative"),
        CheckConstraint("credit >= 0", name="check_credit_non_negative"),
    )


class JournalSequence(Base):
    """Counter row backing gap-free journal serial numbers."""

    __tablename__ = "journal_sequences"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
