"""Driver model."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neopay.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from neopay.models.company import Company


class Driver(Base, TimestampMixin):
    """A company driver or an owner-operator.

    ``type`` drives the defaults for ``pay_rate_type`` (company -> per_mile,
    owner -> percentage) and ``employment_type`` (company -> W2,
    owner -> 1099) unless they are set explicitly.
    """

    __tablename__ = "drivers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[str] = mapped_column(String, nullable=False)
    license: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    type: Mapped[str] = mapped_column(String, nullable=False, default="company")
    employment_type: Mapped[str] = mapped_column(String, nullable=False, default="W2")
    join_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    pay_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 4), nullable=True)
    pay_rate_type: Mapped[str] = mapped_column(String, nullable=False, default="per_mile")
    tax_withholding_percent: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    has_benefits: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)

    __table_args__ = (
        CheckConstraint("type IN ('company', 'owner')", name="drivers_type_check"),
        CheckConstraint(
            "employment_type IN ('W2', '1099')", name="drivers_employment_type_check"
        ),
    )

    company: Mapped[Company | None] = relationship(back_populates="drivers")
