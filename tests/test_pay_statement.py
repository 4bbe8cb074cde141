"""Tests for pay statement aggregation."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from neopay.calculators import ItemType, aggregate_pay_statement, calculate_trip_stats
from neopay.errors import ValidationError

PERIOD = {"period_start": date(2025, 3, 1), "period_end": date(2025, 3, 15)}


def trip(id, amount, distance="0", origin="Dallas", destination="Houston"):
    return SimpleNamespace(
        id=id,
        amount=Decimal(amount) if amount is not None else None,
        distance=Decimal(distance),
        origin=origin,
        destination=destination,
    )


def row(id, amount, description="", category=""):
    return SimpleNamespace(
        id=id, amount=Decimal(amount), description=description, category=category
    )


def aggregate(**overrides):
    kwargs = {
        "company_id": 1,
        "driver_id": 1,
        "driver_name": "Alice Alvarez",
        "trips": [],
        "expenses": [],
        "cash_advances": [],
        "deductions": [],
        "tax_withholding_percent": Decimal("15"),
        **PERIOD,
    }
    kwargs.update(overrides)
    return aggregate_pay_statement(**kwargs)


class TestAggregatePayStatement:
    """Totals and net pay."""

    def test_trip_and_expense_with_withholding(self):
        """110.00 trip, 20.00 expense, 15 percent withholding."""
        draft = aggregate(
            trips=[trip(1, "110.00", "200")],
            expenses=[row(1, "20.00", "Fuel")],
        )

        assert draft.trip_total == Decimal("110.00")
        assert draft.gross_pay == Decimal("110.00")
        assert draft.expense_total == Decimal("20.00")
        assert draft.tax_withholding == Decimal("16.50")
        assert draft.net_pay == Decimal("73.50")
        assert draft.status == "draft"

    def test_all_zero(self):
        draft = aggregate()
        assert draft.gross_pay == Decimal("0.00")
        assert draft.tax_withholding == Decimal("0.00")
        assert draft.net_pay == Decimal("0.00")

    def test_every_component_subtracted(self):
        draft = aggregate(
            trips=[trip(1, "500.00"), trip(2, "250.00")],
            expenses=[row(1, "40.00")],
            cash_advances=[row(1, "100.00", "Advance")],
            deductions=[row(1, "25.00", "Insurance")],
            tax_withholding_percent=Decimal("10"),
        )

        assert draft.gross_pay == Decimal("750.00")
        assert draft.tax_withholding == Decimal("75.00")
        assert draft.deductions_total == Decimal("25.00")
        assert draft.net_pay == Decimal("750.00") - 40 - 100 - 75 - 25

    def test_expenses_do_not_reduce_gross(self):
        draft = aggregate(trips=[trip(1, "100.00")], expenses=[row(1, "30.00")])
        assert draft.gross_pay == Decimal("100.00")

    def test_missing_trip_amount_counts_as_zero(self):
        draft = aggregate(trips=[trip(1, None), trip(2, "10.00")])
        assert draft.trip_total == Decimal("10.00")

    def test_lines_are_signed(self):
        draft = aggregate(
            trips=[trip(7, "110.00")],
            expenses=[row(3, "20.00", category="Tolls")],
            cash_advances=[row(4, "50.00", "Weekend")],
            deductions=[row(5, "5.00", "Uniform")],
        )

        by_type = [(line.item_type, line.amount, line.reference_id) for line in draft.lines]
        assert by_type == [
            (ItemType.TRIP, Decimal("110.00"), 7),
            (ItemType.EXPENSE, Decimal("-20.00"), 3),
            (ItemType.CASH_ADVANCE, Decimal("-50.00"), 4),
            (ItemType.DEDUCTION, Decimal("-5.00"), 5),
            (ItemType.DEDUCTION, Decimal("-16.50"), None),
        ]
        assert draft.lines[0].description == "Trip: Dallas to Houston"
        assert draft.lines[1].description == "Expense: Tolls"
        assert draft.lines[-1].description == "Tax Withholding"

    def test_missing_driver_rejected(self):
        with pytest.raises(ValidationError, match="Missing required fields"):
            aggregate(driver_id=None)

    def test_inverted_period_rejected(self):
        with pytest.raises(ValidationError):
            aggregate(period_start=date(2025, 3, 16), period_end=date(2025, 3, 1))


class TestTripStats:
    def test_totals_and_average(self):
        stats = calculate_trip_stats([trip(1, "110.00", "200"), trip(2, "55.00", "100")])
        assert stats.total_trips == 2
        assert stats.total_miles == Decimal("300")
        assert stats.total_earnings == Decimal("165.00")
        assert stats.average_rate == Decimal("0.5500")

    def test_no_trips(self):
        stats = calculate_trip_stats([])
        assert stats.total_trips == 0
        assert stats.average_rate == Decimal("0")
