"""Deduction service."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select

from neopay.errors import NotFound, ValidationError
from neopay.models import Deduction, Driver
from neopay.services.base import EntityService


class DeductionService(EntityService):
    async def list_for_driver(
        self,
        driver_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Deduction]:
        stmt = select(Deduction).where(Deduction.driver_id == driver_id)
        if start is not None:
            stmt = stmt.where(Deduction.date >= start)
        if end is not None:
            stmt = stmt.where(Deduction.date <= end)
        result = await self.session.execute(
            stmt.order_by(Deduction.date.desc(), Deduction.id.desc())
        )
        return list(result.scalars().all())

    async def create_deduction(self, fields: dict[str, Any]) -> Deduction:
        if not fields.get("driver_id") or fields.get("amount") is None:
            raise ValidationError("Missing required fields")
        if fields["amount"] < 0:
            raise ValidationError("Amount must not be negative")

        driver = await self.session.get(Driver, fields["driver_id"])
        if driver is None:
            raise NotFound("Driver not found")

        deduction = Deduction(
            company_id=driver.company_id,
            driver_id=driver.id,
            type=fields.get("type") or "other",
            description=fields.get("description") or "",
            amount=fields["amount"],
            date=fields.get("date") or date.today(),
        )
        return await self._save(deduction)

    async def delete_deduction(self, deduction_id: int) -> Deduction:
        deduction = await self._get_or_404(Deduction, deduction_id, "Deduction")
        await self._delete(deduction)
        return deduction
