"""Tests for trip amount calculation."""

from decimal import Decimal

import pytest

from neopay.calculators import (
    RateType,
    amount_for_update,
    compute_trip_amount,
    default_employment_type,
    default_rate_type,
    resolve_rate_type,
)


class TestComputeTripAmount:
    """Amount per rate type."""

    def test_per_mile(self):
        """200 miles at 0.55 per mile."""
        assert compute_trip_amount(Decimal("200"), Decimal("0.55"), "per_mile") == Decimal("110.00")

    def test_percentage_uses_two_dollars_per_mile(self):
        """100 miles valued at 200, owner keeps 60 percent."""
        assert compute_trip_amount(Decimal("100"), Decimal("60"), "percentage") == Decimal("120.00")

    def test_per_mile_rounds_half_up_to_cents(self):
        assert compute_trip_amount(Decimal("10"), Decimal("0.1235"), RateType.PER_MILE) == Decimal(
            "1.24"
        )

    def test_hourly(self):
        amount = compute_trip_amount(Decimal("50"), Decimal("25"), "hourly", Decimal("8.5"))
        assert amount == Decimal("212.50")

    def test_hourly_without_hours_is_zero(self):
        assert compute_trip_amount(Decimal("50"), Decimal("25"), "hourly") == Decimal("0.00")
        assert compute_trip_amount(Decimal("50"), Decimal("25"), "hourly", 0) == Decimal("0.00")

    def test_fixed_returns_rate(self):
        assert compute_trip_amount(Decimal("500"), Decimal("750.00"), "fixed") == Decimal("750.00")

    def test_accepts_floats(self):
        assert compute_trip_amount(200, 0.55, "per_mile") == Decimal("110.00")

    def test_unknown_rate_type_rejected(self):
        with pytest.raises(ValueError):
            compute_trip_amount(Decimal("10"), Decimal("1"), "per_ton")


class TestDriverTypeDefaults:
    """Rate and employment type derived from the driver type."""

    def test_owner_is_paid_percentage(self):
        assert default_rate_type("owner") is RateType.PERCENTAGE

    def test_company_is_paid_per_mile(self):
        assert default_rate_type("company") is RateType.PER_MILE

    def test_missing_type_is_per_mile(self):
        assert default_rate_type(None) is RateType.PER_MILE

    def test_employment_type(self):
        assert default_employment_type("owner").value == "1099"
        assert default_employment_type("company").value == "W2"

    def test_explicit_rate_type_wins(self):
        assert resolve_rate_type("hourly", "owner") is RateType.HOURLY
        assert resolve_rate_type(None, "owner") is RateType.PERCENTAGE


class TestAmountForUpdate:
    """Recompute versus override on partial updates."""

    current = {
        "current_distance": Decimal("200"),
        "current_rate": Decimal("0.55"),
        "current_rate_type": "per_mile",
        "current_hours": None,
    }

    def test_rate_change_recomputes_with_stored_distance(self):
        assert amount_for_update(**self.current, rate=Decimal("0.60")) == Decimal("120.00")

    def test_rate_type_change_recomputes(self):
        result = amount_for_update(**self.current, rate=Decimal("50"), rate_type="percentage")
        assert result == Decimal("200.00")

    def test_explicit_amount_is_override(self):
        assert amount_for_update(**self.current, amount=Decimal("99.99")) == Decimal("99.99")

    def test_computed_fields_beat_explicit_amount(self):
        result = amount_for_update(
            **self.current, distance=Decimal("100"), amount=Decimal("1.00")
        )
        assert result == Decimal("55.00")

    def test_nothing_relevant_keeps_amount(self):
        assert amount_for_update(**self.current) is None
