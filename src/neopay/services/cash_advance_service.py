"""Cash advance service."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select

from neopay.errors import NotFound, ValidationError
from neopay.models import CashAdvance, Driver
from neopay.services.base import EntityService


class CashAdvanceService(EntityService):
    async def list_for_driver(
        self,
        driver_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[CashAdvance]:
        stmt = select(CashAdvance).where(CashAdvance.driver_id == driver_id)
        if start is not None:
            stmt = stmt.where(CashAdvance.date >= start)
        if end is not None:
            stmt = stmt.where(CashAdvance.date <= end)
        result = await self.session.execute(
            stmt.order_by(CashAdvance.date.desc(), CashAdvance.id.desc())
        )
        return list(result.scalars().all())

    async def create_cash_advance(self, fields: dict[str, Any]) -> CashAdvance:
        if not fields.get("driver_id") or fields.get("amount") is None:
            raise ValidationError("Missing required fields")
        if fields["amount"] <= 0:
            raise ValidationError("Amount must be greater than 0")

        driver = await self.session.get(Driver, fields["driver_id"])
        if driver is None:
            raise NotFound("Driver not found")

        advance = CashAdvance(
            company_id=driver.company_id,
            driver_id=driver.id,
            date=fields.get("date") or date.today(),
            amount=fields["amount"],
            description=fields.get("description") or "",
            status=fields.get("status") or "pending",
        )
        advance.driver = driver
        return await self._save(advance)

    async def delete_cash_advance(self, advance_id: int) -> CashAdvance:
        advance = await self._get_or_404(CashAdvance, advance_id, "Cash advance")
        await self._delete(advance)
        return advance
