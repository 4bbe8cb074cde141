"""Expense, receipt, cash advance and deduction models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neopay.models.base import Base, TimestampMixin
from neopay.models.driver import Driver


class _DriverNameMixin:
    """Exposes the joined driver's name for response shaping."""

    @property
    def driver_name(self) -> str | None:
        return self.driver.name if self.driver is not None else None


class Expense(_DriverNameMixin, Base, TimestampMixin):
    """A driver expense, optionally backed by a receipt."""

    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
    )
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    receipt_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("receipts.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    driver: Mapped[Driver] = relationship(lazy="joined")


class Receipt(_DriverNameMixin, Base, TimestampMixin):
    """An uploaded receipt image and the fields extracted from it."""

    __tablename__ = "receipts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    storage_path: Mapped[str | None] = mapped_column(String, nullable=True)
    upload_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Processing")
    vendor: Mapped[str | None] = mapped_column(String, nullable=True)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    category: Mapped[str | None] = mapped_column(String, nullable=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Processing', 'Completed', 'Failed')",
            name="receipts_status_check",
        ),
    )

    driver: Mapped[Driver] = relationship(lazy="joined")
    items: Mapped[list[ReceiptItem]] = relationship(
        back_populates="receipt",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="ReceiptItem.id",
    )


class ReceiptItem(Base):
    """A line extracted from a receipt."""

    __tablename__ = "receipt_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    receipt_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("receipts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    receipt: Mapped[Receipt] = relationship(back_populates="items")


class CashAdvance(_DriverNameMixin, Base, TimestampMixin):
    """Cash paid to a driver ahead of settlement."""

    __tablename__ = "cash_advances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
    )
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'paid')",
            name="cash_advances_status_check",
        ),
    )

    driver: Mapped[Driver] = relationship(lazy="joined")


class Deduction(Base, TimestampMixin):
    """An explicit deduction line (insurance, retirement, ...)."""

    __tablename__ = "deductions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
    )
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
    type: Mapped[str] = mapped_column(String, nullable=False, default="other")
    description: Mapped[str] = mapped_column(String, nullable=False, default="")
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "type IN ('tax', 'insurance', 'retirement', 'other')",
            name="deductions_type_check",
        ),
    )
