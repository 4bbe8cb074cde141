"""Trip and load models."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neopay.models.base import Base, TimestampMixin
from neopay.models.driver import Driver


class Trip(Base, TimestampMixin):
    """A paid trip. ``amount`` is derived from distance, rate and rate type."""

    __tablename__ = "trips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    driver_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    load_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("loads.id", ondelete="SET NULL"),
        nullable=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    origin: Mapped[str] = mapped_column(String, nullable=False)
    destination: Mapped[str] = mapped_column(String, nullable=False)
    distance: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    rate: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    rate_type: Mapped[str] = mapped_column(String, nullable=False, default="per_mile")
    hours_worked: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")

    __table_args__ = (
        CheckConstraint(
            "rate_type IN ('per_mile', 'percentage', 'hourly', 'fixed')",
            name="trips_rate_type_check",
        ),
        CheckConstraint(
            "status IN ('pending', 'completed', 'cancelled')",
            name="trips_status_check",
        ),
    )

    driver: Mapped[Driver] = relationship(lazy="joined")

    @property
    def driver_name(self) -> str | None:
        return self.driver.name if self.driver is not None else None

    @property
    def driver_type(self) -> str | None:
        return self.driver.type if self.driver is not None else None


class Load(Base, TimestampMixin):
    """A customer load. Assignment to a driver is orthogonal to status."""

    __tablename__ = "loads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    driver_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("drivers.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    load_number: Mapped[str | None] = mapped_column(String, nullable=True)
    customer: Mapped[str | None] = mapped_column(String, nullable=True)
    pickup_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    delivery_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    origin: Mapped[str | None] = mapped_column(String, nullable=True)
    destination: Mapped[str | None] = mapped_column(String, nullable=True)
    distance: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="assigned")
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('assigned', 'in_progress', 'completed', 'cancelled')",
            name="loads_status_check",
        ),
    )
