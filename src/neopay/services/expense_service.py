"""Expense service."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select

from neopay.calculators.trip_amount import round_to_cents, to_decimal
from neopay.errors import NotFound, ValidationError
from neopay.models import Driver, Expense, Receipt
from neopay.services.base import EntityService

REQUIRED_FIELDS = ("driver_id", "category", "amount", "date")

UPDATABLE_FIELDS = frozenset({"category", "amount", "date", "description"})


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class DriverSummary:
    driver_id: int
    driver_name: str | None
    total: Decimal
    count: int


def _money(value: Any) -> Decimal:
    return round_to_cents(to_decimal(value) or Decimal("0"))


class ExpenseService(EntityService):
    """Expense CRUD, receipt conversion and summaries."""

    async def list_expenses(self) -> list[Expense]:
        result = await self.session.execute(
            select(Expense).order_by(Expense.date.desc(), Expense.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_driver(
        self,
        driver_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Expense]:
        stmt = select(Expense).where(Expense.driver_id == driver_id)
        if start is not None:
            stmt = stmt.where(Expense.date >= start)
        if end is not None:
            stmt = stmt.where(Expense.date <= end)
        result = await self.session.execute(stmt.order_by(Expense.date.desc(), Expense.id.desc()))
        return list(result.scalars().all())

    async def list_for_category(self, category: str) -> list[Expense]:
        result = await self.session.execute(
            select(Expense)
            .where(Expense.category == category)
            .order_by(Expense.date.desc(), Expense.id.desc())
        )
        return list(result.scalars().all())

    async def get_expense(self, expense_id: int) -> Expense:
        return await self._get_or_404(Expense, expense_id, "Expense")

    async def create_expense(self, fields: dict[str, Any], user_id: str) -> Expense:
        if any(fields.get(name) in (None, "") for name in REQUIRED_FIELDS):
            raise ValidationError("Missing required fields")

        driver = await self.session.get(Driver, fields["driver_id"])
        if driver is None:
            raise NotFound("Driver not found")

        expense = Expense(
            company_id=driver.company_id,
            driver_id=driver.id,
            category=fields["category"],
            amount=fields["amount"],
            date=fields["date"],
            description=fields.get("description") or "",
            receipt_id=fields.get("receipt_id"),
            user_id=user_id,
        )
        expense.driver = driver
        return await self._save(expense)

    async def create_from_receipt(self, receipt: Receipt, user_id: str) -> Expense:
        """Turn a receipt's extracted fields into an expense."""
        expense = Expense(
            company_id=receipt.driver.company_id if receipt.driver is not None else None,
            driver_id=receipt.driver_id,
            category=receipt.category or "Uncategorized",
            amount=receipt.amount if receipt.amount is not None else Decimal("0.00"),
            date=receipt.date or date.today(),
            description=receipt.vendor or "",
            receipt_id=receipt.id,
            user_id=user_id,
        )
        expense.driver = receipt.driver
        return await self._save(expense)

    async def update_expense(self, expense: Expense, fields: dict[str, Any]) -> Expense:
        self._apply(expense, fields, UPDATABLE_FIELDS)
        return await self._save(expense)

    async def delete_expense(self, expense: Expense) -> Expense:
        await self._delete(expense)
        return expense

    async def summary_by_category(self) -> list[CategorySummary]:
        result = await self.session.execute(
            select(Expense.category, func.sum(Expense.amount), func.count(Expense.id))
            .group_by(Expense.category)
            .order_by(Expense.category)
        )
        return [
            CategorySummary(category=category, total=_money(total), count=count)
            for category, total, count in result.all()
        ]

    async def summary_by_driver(self) -> list[DriverSummary]:
        result = await self.session.execute(
            select(
                Expense.driver_id,
                Driver.name,
                func.sum(Expense.amount),
                func.count(Expense.id),
            )
            .join(Driver, Driver.id == Expense.driver_id, isouter=True)
            .group_by(Expense.driver_id, Driver.name)
            .order_by(Expense.driver_id)
        )
        return [
            DriverSummary(driver_id=driver_id, driver_name=name, total=_money(total), count=count)
            for driver_id, name, total, count in result.all()
        ]
