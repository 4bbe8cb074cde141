"""Pay statement aggregation.

Combines a driver's trips, expenses, cash advances and deductions for one
period into a statement snapshot:

    gross_pay       = trip_total
    tax_withholding = gross_pay * tax_withholding_percent / 100
    net_pay         = gross_pay - expense_total - cash_advance_total
                      - tax_withholding - deductions_total

Expenses and advances are not taken out of gross; they are separate lines.
Inputs must already be filtered to the period.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from neopay.calculators.trip_amount import round_to_cents, to_decimal
from neopay.calculators.types import (
    AmountSource,
    ItemType,
    PayStatementDraft,
    StatementLine,
    TripStats,
)
from neopay.errors import ValidationError

ZERO = Decimal("0.00")


def sum_amounts(rows: Iterable[AmountSource]) -> Decimal:
    """Sum ``amount`` over rows; a missing amount contributes 0."""
    total = ZERO
    for row in rows:
        total += to_decimal(row.amount) or ZERO
    return round_to_cents(total)


def calculate_tax_withholding(gross_pay: Decimal, tax_withholding_percent: Decimal) -> Decimal:
    return round_to_cents(gross_pay * to_decimal(tax_withholding_percent) / Decimal("100"))


def aggregate_pay_statement(
    *,
    company_id: int | None,
    driver_id: int | None,
    driver_name: str,
    period_start: date | None,
    period_end: date | None,
    trips: Sequence[AmountSource],
    expenses: Sequence[AmountSource],
    cash_advances: Sequence[AmountSource],
    deductions: Sequence[AmountSource],
    tax_withholding_percent: Decimal,
) -> PayStatementDraft:
    """Build a draft pay statement with totals and signed lines.

    Raises:
        ValidationError: If driver or period bounds are missing, or the
            period is inverted.
    """
    if not driver_id or period_start is None or period_end is None:
        raise ValidationError("Missing required fields")
    if period_start > period_end:
        raise ValidationError("periodStart must not be after periodEnd")

    tax_withholding_percent = to_decimal(tax_withholding_percent)

    trip_total = sum_amounts(trips)
    expense_total = sum_amounts(expenses)
    cash_advance_total = sum_amounts(cash_advances)
    deductions_total = sum_amounts(deductions)

    gross_pay = trip_total
    tax_withholding = calculate_tax_withholding(gross_pay, tax_withholding_percent)
    net_pay = gross_pay - expense_total - cash_advance_total - tax_withholding - deductions_total

    draft = PayStatementDraft(
        company_id=company_id,
        driver_id=driver_id,
        driver_name=driver_name,
        period_start=period_start,
        period_end=period_end,
        tax_withholding_percent=tax_withholding_percent,
        trip_total=trip_total,
        expense_total=expense_total,
        cash_advance_total=cash_advance_total,
        gross_pay=gross_pay,
        tax_withholding=tax_withholding,
        deductions_total=deductions_total,
        net_pay=round_to_cents(net_pay),
    )
    draft.lines = build_statement_lines(
        trips, expenses, cash_advances, deductions, tax_withholding
    )
    return draft


def build_statement_lines(
    trips: Sequence[AmountSource],
    expenses: Sequence[AmountSource],
    cash_advances: Sequence[AmountSource],
    deductions: Sequence[AmountSource],
    tax_withholding: Decimal,
) -> list[StatementLine]:
    """One line per source row plus a tax withholding line.

    Trips are positive; expenses, advances, deductions and tax are negative.
    """
    lines: list[StatementLine] = []

    for trip in trips:
        lines.append(
            StatementLine(
                item_type=ItemType.TRIP,
                amount=round_to_cents(to_decimal(trip.amount) or ZERO),
                description=f"Trip: {getattr(trip, 'origin', '')} to {getattr(trip, 'destination', '')}",
                reference_id=trip.id,
            )
        )
    for expense in expenses:
        lines.append(
            StatementLine(
                item_type=ItemType.EXPENSE,
                amount=-round_to_cents(to_decimal(expense.amount) or ZERO),
                description=f"Expense: {getattr(expense, 'description', '') or getattr(expense, 'category', '')}",
                reference_id=expense.id,
            )
        )
    for advance in cash_advances:
        lines.append(
            StatementLine(
                item_type=ItemType.CASH_ADVANCE,
                amount=-round_to_cents(to_decimal(advance.amount) or ZERO),
                description=f"Cash Advance: {getattr(advance, 'description', '')}",
                reference_id=advance.id,
            )
        )
    for deduction in deductions:
        lines.append(
            StatementLine(
                item_type=ItemType.DEDUCTION,
                amount=-round_to_cents(to_decimal(deduction.amount) or ZERO),
                description=f"Deduction: {getattr(deduction, 'description', '')}",
                reference_id=deduction.id,
            )
        )

    lines.append(
        StatementLine(
            item_type=ItemType.DEDUCTION,
            amount=-tax_withholding,
            description="Tax Withholding",
        )
    )
    return lines


def calculate_trip_stats(trips: Sequence[AmountSource]) -> TripStats:
    """Totals and average earnings per mile for a set of trips."""
    total_miles = sum(
        (to_decimal(getattr(t, "distance", None)) or ZERO for t in trips), ZERO
    )
    total_earnings = sum_amounts(trips)
    average_rate = (
        (total_earnings / total_miles).quantize(Decimal("0.0001"))
        if total_miles > 0
        else Decimal("0")
    )
    return TripStats(
        total_trips=len(trips),
        total_miles=total_miles,
        total_earnings=total_earnings,
        average_rate=average_rate,
    )
