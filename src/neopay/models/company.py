"""Company (tenant) and membership models."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from neopay.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from neopay.models.driver import Driver


class Company(Base, TimestampMixin):
    """Root tenant scope. Every other entity belongs to exactly one company."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str | None] = mapped_column(String, nullable=True)
    city: Mapped[str | None] = mapped_column(String, nullable=True)
    state: Mapped[str | None] = mapped_column(String, nullable=True)
    zip: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    website: Mapped[str | None] = mapped_column(String, nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default="Active")
    subscription_tier: Mapped[str] = mapped_column(String, nullable=False, default="basic")
    subscription_status: Mapped[str] = mapped_column(String, nullable=False, default="trial")
    trial_ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "status IN ('Active', 'Inactive', 'Suspended')",
            name="companies_status_check",
        ),
        CheckConstraint(
            "subscription_tier IN ('basic', 'premium', 'enterprise')",
            name="companies_tier_check",
        ),
        CheckConstraint(
            "subscription_status IN ('trial', 'active', 'expired', 'cancelled')",
            name="companies_subscription_status_check",
        ),
    )

    # Rows are removed by the ON DELETE CASCADE foreign keys
    members: Mapped[list[CompanyUser]] = relationship(
        back_populates="company", passive_deletes=True
    )
    drivers: Mapped[list[Driver]] = relationship(back_populates="company", passive_deletes=True)


class CompanyUser(Base, TimestampMixin):
    """Membership of an identity in a company, with a single role."""

    __tablename__ = "company_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    company_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    role: Mapped[str] = mapped_column(String, nullable=False, default="user")

    __table_args__ = (
        UniqueConstraint("company_id", "user_id", name="company_users_membership_key"),
        CheckConstraint(
            "role IN ('admin', 'manager', 'accountant', 'dispatcher', 'user')",
            name="company_users_role_check",
        ),
    )

    company: Mapped[Company] = relationship(back_populates="members")
