"""Trip amount calculation and driver-type defaults."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from neopay.calculators.types import DriverType, EmploymentType, RateType

CENTS = Decimal("0.01")

# Percentage-paid trips are valued at a fixed $2 per mile before the
# driver's percentage is applied. Not configurable per company or driver.
PERCENTAGE_BASE_PER_MILE = Decimal("2")


def to_decimal(value: Decimal | int | float | str | None) -> Decimal | None:
    """Coerce a numeric input to Decimal, going through str for floats."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (cents)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_trip_amount(
    distance: Decimal | int | float,
    rate: Decimal | int | float,
    rate_type: RateType | str,
    hours_worked: Decimal | int | float | None = None,
) -> Decimal:
    """Compute the monetary amount for a trip.

    - per_mile:   distance * rate
    - percentage: (distance * 2) * rate / 100
    - hourly:     hours_worked * rate, 0.00 when hours are not supplied
    - fixed:      rate as given
    """
    distance = to_decimal(distance)
    rate = to_decimal(rate)
    hours = to_decimal(hours_worked)
    rate_type = RateType(rate_type)

    if rate_type is RateType.PER_MILE:
        return round_to_cents(distance * rate)
    if rate_type is RateType.PERCENTAGE:
        trip_value = distance * PERCENTAGE_BASE_PER_MILE
        return round_to_cents(trip_value * (rate / Decimal("100")))
    if rate_type is RateType.HOURLY:
        if not hours:
            return Decimal("0.00")
        return round_to_cents(hours * rate)
    return rate


def default_rate_type(driver_type: DriverType | str | None) -> RateType:
    """Owner-operators are paid a percentage; everyone else per mile."""
    if driver_type == DriverType.OWNER:
        return RateType.PERCENTAGE
    return RateType.PER_MILE


def default_employment_type(driver_type: DriverType | str | None) -> EmploymentType:
    if driver_type == DriverType.OWNER:
        return EmploymentType.CONTRACTOR_1099
    return EmploymentType.W2


def resolve_rate_type(
    rate_type: RateType | str | None,
    driver_type: DriverType | str | None,
) -> RateType:
    """Use the explicit rate type if given, otherwise derive it from the driver."""
    if rate_type:
        return RateType(rate_type)
    return default_rate_type(driver_type)


def amount_for_update(
    *,
    current_distance: Decimal,
    current_rate: Decimal,
    current_rate_type: RateType | str,
    current_hours: Decimal | None,
    distance: Decimal | None = None,
    rate: Decimal | None = None,
    rate_type: RateType | str | None = None,
    hours_worked: Decimal | None = None,
    amount: Decimal | None = None,
) -> Decimal | None:
    """Decide the trip amount after a partial update.

    Supplying distance, rate, rate type or hours recomputes the amount from
    the merged values. Otherwise an explicit ``amount`` is taken as an
    override. Returns None when the stored amount should stay as is.
    """
    if any(v is not None for v in (distance, rate, rate_type, hours_worked)):
        return compute_trip_amount(
            distance if distance is not None else current_distance,
            rate if rate is not None else current_rate,
            rate_type or current_rate_type or RateType.PER_MILE,
            hours_worked if hours_worked is not None else current_hours,
        )
    if amount is not None:
        return amount
    return None
