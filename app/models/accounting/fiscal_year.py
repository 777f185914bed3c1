"""Fiscal year model."""

from datetime import datetime, date
from uuid import uuid4, UUID
from sqlalchemy import String, Date, Boolean, CheckConstraint, Uuid
from sqlalchemy.orm import mapped_column, Mapped

from app.models.base import Base


class FiscalYear(Base):
    """Accounting period that bounds journals and reports."""

    __tablename__ = "fiscal_years"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    is_closed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="check_fiscal_year_range"),
    )

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date
