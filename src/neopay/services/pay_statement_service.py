"""Pay statement generation and lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import select

from neopay.calculators import PayStatementDraft, aggregate_pay_statement
from neopay.errors import NotFound, ValidationError
from neopay.models import CashAdvance, Deduction, Driver, Expense, PayStatement, PayStatementItem, Trip
from neopay.services.base import EntityService
from neopay.services.cash_advance_service import CashAdvanceService
from neopay.services.deduction_service import DeductionService
from neopay.services.expense_service import ExpenseService
from neopay.services.state_machine import PayStatementStateMachine, PayStatementStatus
from neopay.services.trip_service import TripService

logger = logging.getLogger(__name__)


@dataclass
class PeriodActivity:
    """A driver's rows inside one inclusive date range."""

    trips: list[Trip]
    expenses: list[Expense]
    cash_advances: list[CashAdvance]
    deductions: list[Deduction]


class PayStatementService(EntityService):
    """Generates statements with the aggregator and moves them through
    draft → finalized → paid.

    Generation is not idempotent: the same driver and period can be
    generated any number of times.
    """

    async def list_statements(self) -> list[PayStatement]:
        result = await self.session.execute(
            select(PayStatement).order_by(PayStatement.period_end.desc(), PayStatement.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_driver(self, driver_id: int) -> list[PayStatement]:
        result = await self.session.execute(
            select(PayStatement)
            .where(PayStatement.driver_id == driver_id)
            .order_by(PayStatement.period_end.desc(), PayStatement.id.desc())
        )
        return list(result.scalars().all())

    async def get_statement(self, statement_id: int) -> PayStatement:
        return await self._get_or_404(PayStatement, statement_id, "Pay statement")

    async def load_activity(self, driver_id: int, start: date, end: date) -> PeriodActivity:
        return PeriodActivity(
            trips=await TripService(self.session).list_for_driver(driver_id, start, end),
            expenses=await ExpenseService(self.session).list_for_driver(driver_id, start, end),
            cash_advances=await CashAdvanceService(self.session).list_for_driver(
                driver_id, start, end
            ),
            deductions=await DeductionService(self.session).list_for_driver(
                driver_id, start, end
            ),
        )

    async def generate(
        self,
        *,
        driver_id: int | None,
        period_start: date | None,
        period_end: date | None,
        user_id: str,
        default_tax_withholding_percent: Decimal,
        tax_withholding_percent: Decimal | None = None,
    ) -> tuple[PayStatement, PeriodActivity]:
        """Aggregate a driver's period into a new draft statement.

        The withholding percent is the explicit value if given, else the
        driver's own ``tax_withholding_percent``, else the default.

        Raises:
            ValidationError: Missing driver or period bounds, or an
                inverted period. Nothing is written.
            NotFound: The driver does not exist.
        """
        if not driver_id or period_start is None or period_end is None:
            raise ValidationError("Missing required fields")
        if period_start > period_end:
            raise ValidationError("periodStart must not be after periodEnd")

        driver = await self.session.get(Driver, driver_id)
        if driver is None:
            raise NotFound("Driver not found")

        if tax_withholding_percent is None:
            tax_withholding_percent = (
                driver.tax_withholding_percent
                if driver.tax_withholding_percent is not None
                else default_tax_withholding_percent
            )

        activity = await self.load_activity(driver.id, period_start, period_end)
        draft = aggregate_pay_statement(
            company_id=driver.company_id,
            driver_id=driver.id,
            driver_name=driver.name,
            period_start=period_start,
            period_end=period_end,
            trips=activity.trips,
            expenses=activity.expenses,
            cash_advances=activity.cash_advances,
            deductions=activity.deductions,
            tax_withholding_percent=tax_withholding_percent,
        )

        statement = self._from_draft(draft, user_id)
        statement.driver = driver
        statement = await self._save(statement)
        logger.info(
            "Generated pay statement %s for driver %s, %s to %s: net %s",
            statement.id, driver.id, period_start, period_end, statement.net_pay,
        )
        return statement, activity

    @staticmethod
    def _from_draft(draft: PayStatementDraft, user_id: str) -> PayStatement:
        return PayStatement(
            company_id=draft.company_id,
            driver_id=draft.driver_id,
            period_start=draft.period_start,
            period_end=draft.period_end,
            trip_total=draft.trip_total,
            expense_total=draft.expense_total,
            cash_advance_total=draft.cash_advance_total,
            gross_pay=draft.gross_pay,
            tax_withholding_percent=draft.tax_withholding_percent,
            tax_withholding=draft.tax_withholding,
            deductions_total=draft.deductions_total,
            net_pay=draft.net_pay,
            status=draft.status,
            generated_date=date.today(),
            user_id=user_id,
            items=[
                PayStatementItem(
                    item_type=line.item_type.value,
                    reference_id=line.reference_id,
                    description=line.description,
                    amount=line.amount,
                )
                for line in draft.lines
            ],
        )

    async def transition_status(self, statement: PayStatement, to_status: str) -> PayStatement:
        """Move a statement forward. Raises InvalidTransitionError otherwise."""
        PayStatementStateMachine.validate_transition(statement.status, to_status)
        old_status = statement.status
        statement.status = PayStatementStatus(to_status).value
        statement = await self._save(statement)
        logger.info("Pay statement %s: %s -> %s", statement.id, old_status, statement.status)
        return statement

    async def delete_statement(self, statement: PayStatement) -> PayStatement:
        if not PayStatementStateMachine.can_delete(statement.status):
            raise ValidationError(
                f"Only draft pay statements can be deleted (status is '{statement.status}')"
            )
        await self._delete(statement)
        return statement
