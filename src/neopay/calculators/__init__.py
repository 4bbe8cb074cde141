"""Pay calculations."""

from neopay.calculators.pay_statement import (
    aggregate_pay_statement,
    calculate_tax_withholding,
    calculate_trip_stats,
)
from neopay.calculators.trip_amount import (
    PERCENTAGE_BASE_PER_MILE,
    amount_for_update,
    compute_trip_amount,
    default_employment_type,
    default_rate_type,
    resolve_rate_type,
    round_to_cents,
)
from neopay.calculators.types import (
    DriverType,
    EmploymentType,
    ItemType,
    PayStatementDraft,
    RateType,
    StatementLine,
    TripStats,
)

__all__ = [
    "PERCENTAGE_BASE_PER_MILE",
    "aggregate_pay_statement",
    "amount_for_update",
    "calculate_tax_withholding",
    "calculate_trip_stats",
    "compute_trip_amount",
    "default_employment_type",
    "default_rate_type",
    "resolve_rate_type",
    "round_to_cents",
    "DriverType",
    "EmploymentType",
    "ItemType",
    "PayStatementDraft",
    "RateType",
    "StatementLine",
    "TripStats",
]
