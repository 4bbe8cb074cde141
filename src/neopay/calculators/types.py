"""Type definitions for pay calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Protocol


class DriverType(str, Enum):
    """Driver classification."""

    COMPANY = "company"
    OWNER = "owner"


class EmploymentType(str, Enum):
    W2 = "W2"
    CONTRACTOR_1099 = "1099"


class RateType(str, Enum):
    """How a trip amount is derived from its rate."""

    PER_MILE = "per_mile"
    PERCENTAGE = "percentage"
    HOURLY = "hourly"
    FIXED = "fixed"


class ItemType(str, Enum):
    """Pay statement line types."""

    TRIP = "trip"
    EXPENSE = "expense"
    CASH_ADVANCE = "cash_advance"
    DEDUCTION = "deduction"
    ADJUSTMENT = "adjustment"


class AmountSource(Protocol):
    """Anything with an id and an amount (trips, expenses, advances, deductions)."""

    id: int
    amount: Decimal | None


@dataclass
class StatementLine:
    """A pay statement line before persistence."""

    item_type: ItemType
    amount: Decimal  # Signed: earnings positive, everything withheld negative
    description: str
    reference_id: int | None = None


@dataclass
class PayStatementDraft:
    """Result of aggregating one driver's activity over one period."""

    company_id: int | None
    driver_id: int
    driver_name: str
    period_start: date
    period_end: date
    tax_withholding_percent: Decimal

    trip_total: Decimal = Decimal("0.00")
    expense_total: Decimal = Decimal("0.00")
    cash_advance_total: Decimal = Decimal("0.00")
    gross_pay: Decimal = Decimal("0.00")
    tax_withholding: Decimal = Decimal("0.00")
    deductions_total: Decimal = Decimal("0.00")
    net_pay: Decimal = Decimal("0.00")
    status: str = "draft"

    lines: list[StatementLine] = field(default_factory=list)


@dataclass(frozen=True)
class TripStats:
    """Summary of a set of trips."""

    total_trips: int
    total_miles: Decimal
    total_earnings: Decimal
    average_rate: Decimal
