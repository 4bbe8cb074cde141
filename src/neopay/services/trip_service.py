"""Trip service.

Every write goes through the trip amount calculator so ``amount`` always
follows distance, rate, rate type and hours.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import select

from neopay.calculators import (
    TripStats,
    amount_for_update,
    calculate_trip_stats,
    compute_trip_amount,
    default_rate_type,
    resolve_rate_type,
)
from neopay.errors import NotFound, ValidationError
from neopay.models import Driver, Load, Trip
from neopay.services.base import EntityService, reject_nulls

REQUIRED_FIELDS = ("driver_id", "date", "origin", "destination", "distance", "rate")

UPDATABLE_FIELDS = frozenset(
    {
        "company_id",
        "load_id",
        "date",
        "origin",
        "destination",
        "distance",
        "rate",
        "rate_type",
        "hours_worked",
        "status",
    }
)


class TripService(EntityService):
    """Trip CRUD plus per-driver statistics."""

    async def list_trips(self) -> list[Trip]:
        result = await self.session.execute(
            select(Trip).order_by(Trip.date.desc(), Trip.id.desc())
        )
        return list(result.scalars().unique().all())

    async def list_for_driver(
        self,
        driver_id: int,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Trip]:
        """A driver's trips, newest first, optionally within [start, end]."""
        stmt = select(Trip).where(Trip.driver_id == driver_id)
        if start is not None:
            stmt = stmt.where(Trip.date >= start)
        if end is not None:
            stmt = stmt.where(Trip.date <= end)
        result = await self.session.execute(stmt.order_by(Trip.date.desc(), Trip.id.desc()))
        return list(result.scalars().unique().all())

    async def get_trip(self, trip_id: int) -> Trip:
        return await self._get_or_404(Trip, trip_id, "Trip")

    async def driver_stats(self, driver_id: int) -> TripStats:
        return calculate_trip_stats(await self.list_for_driver(driver_id))

    async def _get_driver(self, driver_id: int) -> Driver:
        driver = await self.session.get(Driver, driver_id)
        if driver is None:
            raise NotFound("Driver not found")
        return driver

    async def _check_load(self, load_id: int | None) -> None:
        if load_id is not None and await self.session.get(Load, load_id) is None:
            raise NotFound("Load not found")

    async def create_trip(self, fields: dict[str, Any]) -> Trip:
        """Create a trip, deriving rate type from the driver when not given."""
        if any(fields.get(name) in (None, "") for name in REQUIRED_FIELDS):
            raise ValidationError("Missing required fields")
        if fields["distance"] <= 0:
            raise ValidationError("Distance must be greater than 0")

        driver = await self._get_driver(fields["driver_id"])
        await self._check_load(fields.get("load_id"))

        rate_type = resolve_rate_type(fields.get("rate_type"), driver.type)
        trip = Trip(
            company_id=fields.get("company_id") or driver.company_id,
            driver_id=driver.id,
            load_id=fields.get("load_id"),
            date=fields["date"],
            origin=fields["origin"],
            destination=fields["destination"],
            distance=fields["distance"],
            rate=fields["rate"],
            rate_type=rate_type.value,
            hours_worked=fields.get("hours_worked"),
            amount=compute_trip_amount(
                fields["distance"], fields["rate"], rate_type, fields.get("hours_worked")
            ),
            status=fields.get("status") or "pending",
        )
        trip.driver = driver
        return await self._save(trip)

    async def update_trip(self, trip_id: int, fields: dict[str, Any]) -> Trip:
        """Apply a partial update.

        Changing the driver without giving a rate type re-derives the rate
        type from the new driver. Any change to distance, rate, rate type or
        hours recomputes the amount; otherwise an explicit ``amount`` is
        stored as an override.
        """
        trip = await self.get_trip(trip_id)
        reject_nulls(Trip, fields, UPDATABLE_FIELDS)

        distance = fields.get("distance")
        if distance is not None and distance <= 0:
            raise ValidationError("Distance must be greater than 0")

        rate_type = fields.get("rate_type")
        new_driver_id = fields.get("driver_id")
        if new_driver_id is not None:
            driver = await self._get_driver(new_driver_id)
            trip.driver_id = driver.id
            trip.driver = driver
            if rate_type is None:
                rate_type = default_rate_type(driver.type).value
                fields["rate_type"] = rate_type

        if "load_id" in fields:
            await self._check_load(fields["load_id"])

        new_amount = amount_for_update(
            current_distance=trip.distance,
            current_rate=trip.rate,
            current_rate_type=trip.rate_type,
            current_hours=trip.hours_worked,
            distance=distance,
            rate=fields.get("rate"),
            rate_type=rate_type,
            hours_worked=fields.get("hours_worked"),
            amount=fields.get("amount"),
        )

        self._apply(trip, fields, UPDATABLE_FIELDS)
        if new_amount is not None:
            trip.amount = new_amount
        return await self._save(trip)

    async def delete_trip(self, trip_id: int) -> Trip:
        trip = await self.get_trip(trip_id)
        await self._delete(trip)
        return trip
