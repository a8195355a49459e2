"""Budget-related SQLAlchemy models."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budget_planner.models.base import Base, TimestampMixin

MONEY = Numeric(12, 2)


class IncomeRecord(Base, TimestampMixin):
    """A saved pay breakdown.

    Every save appends a row; exactly one row is flagged is_current.
    """

    __tablename__ = "incomes"

    id: Mapped[int] = mapped_column(primary_key=True)
    gross_pay: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    sha: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    payee: Mapped[Decimal] = mapped_column(MONEY, nullable=False, default=Decimal("0"))
    housing_levy: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    total_deductions: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    net_pay: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    is_current: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, index=True
    )


class CategoryRecord(Base, TimestampMixin):
    """A budget category.

    name_key holds the lowercased name so the unique constraint is
    case-insensitive on every backend.
    """

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    name_key: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    planned_amount: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    actual_spent: Mapped[Decimal] = mapped_column(
        MONEY, nullable=False, default=Decimal("0")
    )
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    expenses: Mapped[list["ExpenseRecord"]] = relationship(
        back_populates="category",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ExpenseRecord.position",
    )


class ExpenseRecord(Base, TimestampMixin):
    """An expense owned by one category."""

    __tablename__ = "expenses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    category_id: Mapped[str] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    description: Mapped[str] = mapped_column(String(100), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    category: Mapped["CategoryRecord"] = relationship(back_populates="expenses")
