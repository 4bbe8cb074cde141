"""Payment and pay statement models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neopay.models.base import Base, TimestampMixin
from neopay.models.driver import Driver


class Payment(Base, TimestampMixin):
    """A payment owed or made to a driver."""

    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pay_statement_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("pay_statements.id", ondelete="SET NULL"),
        nullable=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Pending")
    description: Mapped[str | None] = mapped_column(String, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    driver: Mapped[Driver] = relationship(lazy="joined")

    @property
    def driver_name(self) -> str | None:
        return self.driver.name if self.driver is not None else None


class PayStatement(Base, TimestampMixin):
    """Snapshot of a driver's pay over one period.

    Monetary fields are written once at generation; only ``status`` moves
    afterwards (draft -> finalized -> paid).
    """

    __tablename__ = "pay_statements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_start: Mapped[dt.date] = mapped_column(Date, nullable=False)
    period_end: Mapped[dt.date] = mapped_column(Date, nullable=False)
    trip_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    expense_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cash_advance_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    gross_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax_withholding_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    tax_withholding: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deductions_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    net_pay: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="draft")
    generated_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('draft', 'finalized', 'paid')",
            name="pay_statements_status_check",
        ),
    )

    driver: Mapped[Driver] = relationship(lazy="joined")
    items: Mapped[list[PayStatementItem]] = relationship(
        back_populates="statement",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="PayStatementItem.id",
    )

    @property
    def driver_name(self) -> str | None:
        return self.driver.name if self.driver is not None else None


class PayStatementItem(Base):
    """One line on a pay statement. Earnings positive, deductions negative."""

    __tablename__ = "pay_statement_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pay_statement_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pay_statements.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    item_type: Mapped[str] = mapped_column(String, nullable=False)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    description: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (
        CheckConstraint(
            "item_type IN ('trip', 'expense', 'cash_advance', 'deduction', 'adjustment')",
            name="pay_statement_items_type_check",
        ),
    )

    statement: Mapped[PayStatement] = relationship(back_populates="items")
