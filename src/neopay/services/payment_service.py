"""Payment service."""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select

from neopay.errors import NotFound, ValidationError
from neopay.models import Driver, Payment, PayStatement
from neopay.services.base import EntityService

UPDATABLE_FIELDS = frozenset({"amount", "date", "status", "description"})


class PaymentService(EntityService):
    """Payment CRUD."""

    async def list_payments(self) -> list[Payment]:
        result = await self.session.execute(
            select(Payment).order_by(Payment.date.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_driver(self, driver_id: int) -> list[Payment]:
        result = await self.session.execute(
            select(Payment)
            .where(Payment.driver_id == driver_id)
            .order_by(Payment.date.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def get_payment(self, payment_id: int) -> Payment:
        return await self._get_or_404(Payment, payment_id, "Payment")

    async def create_payment(self, fields: dict[str, Any], user_id: str) -> Payment:
        if not fields.get("driver_id") or fields.get("amount") is None:
            raise ValidationError("Missing required fields")

        driver = await self.session.get(Driver, fields["driver_id"])
        if driver is None:
            raise NotFound("Driver not found")

        payment = Payment(
            driver_id=driver.id,
            amount=fields["amount"],
            date=fields.get("date") or date.today(),
            status=fields.get("status") or "Pending",
            description=fields.get("description"),
            user_id=user_id,
        )
        payment.driver = driver
        return await self._save(payment)

    async def create_for_statement(self, statement: PayStatement, user_id: str) -> Payment:
        """A Pending payment for a statement's net pay."""
        payment = Payment(
            driver_id=statement.driver_id,
            pay_statement_id=statement.id,
            amount=statement.net_pay,
            date=date.today(),
            status="Pending",
            description=(
                f"Payment for period {statement.period_start.isoformat()} "
                f"to {statement.period_end.isoformat()}"
            ),
            user_id=user_id,
        )
        payment.driver = statement.driver
        return await self._save(payment)

    async def update_payment(self, payment_id: int, fields: dict[str, Any]) -> Payment:
        payment = await self.get_payment(payment_id)
        self._apply(payment, fields, UPDATABLE_FIELDS)
        return await self._save(payment)

    async def delete_payment(self, payment_id: int) -> Payment:
        payment = await self.get_payment(payment_id)
        await self._delete(payment)
        return payment
