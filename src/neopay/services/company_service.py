"""Company service: tenant records, memberships and dashboard statistics."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, or_, select

from neopay.auth.roles import COMPANY_ROLES
from neopay.calculators import round_to_cents
from neopay.errors import NotFound, ValidationError
from neopay.models import Company, CompanyUser, Driver, Load, Payment, Trip
from neopay.services.base import EntityService

UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "address",
        "city",
        "state",
        "zip",
        "phone",
        "email",
        "website",
        "tax_id",
        "status",
        "subscription_tier",
        "subscription_status",
        "trial_ends_at",
        "owner_id",
    }
)

INVALID_ROLE_MESSAGE = "Invalid role. Must be one of: " + ", ".join(r.value for r in COMPANY_ROLES)


@dataclass(frozen=True)
class CompanyStats:
    """Headline numbers for a company dashboard.

    Payment and earning totals are money; everything else is a row count.
    """

    total_drivers: int
    active_drivers: int
    company_drivers: int
    owner_operators: int
    w2_drivers: int
    contractors: int
    total_payments: Decimal
    pending_payments: Decimal
    total_trip_earnings: Decimal
    total_loads: int
    assigned_loads: int
    in_progress_loads: int
    completed_loads: int


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _money(value: Any) -> Decimal:
    return round_to_cents(Decimal(str(value or 0)))


class CompanyService(EntityService):
    async def list_for_user(self, user_id: str, company_id: int | None = None) -> list[Company]:
        """Companies the user owns, belongs to, or is scoped to by claim."""
        memberships = select(CompanyUser.company_id).where(CompanyUser.user_id == user_id)
        conditions = [Company.owner_id == user_id, Company.id.in_(memberships)]
        if company_id is not None:
            conditions.append(Company.id == company_id)
        result = await self.session.execute(
            select(Company).where(or_(*conditions)).order_by(Company.name, Company.id)
        )
        return list(result.scalars().all())

    async def get_company(self, company_id: int) -> Company:
        return await self._get_or_404(Company, company_id, "Company")

    async def create_company(self, fields: dict[str, Any], owner_id: str) -> Company:
        if not fields.get("name"):
            raise ValidationError("Missing required fields: name")
        company = Company(owner_id=fields.get("owner_id") or owner_id)
        self._apply(company, {k: v for k, v in fields.items() if k != "owner_id"}, UPDATABLE_FIELDS)
        return await self._save(company)

    async def update_company(self, company_id: int, fields: dict[str, Any]) -> Company:
        company = await self.get_company(company_id)
        self._apply(company, fields, UPDATABLE_FIELDS)
        return await self._save(company)

    async def delete_company(self, company_id: int) -> Company:
        company = await self.get_company(company_id)
        await self._delete(company)
        return company

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    @staticmethod
    def _check_role(role: str | None) -> None:
        if role not in {r.value for r in COMPANY_ROLES}:
            raise ValidationError(INVALID_ROLE_MESSAGE)

    async def _find_member(self, company_id: int, user_id: str) -> CompanyUser | None:
        result = await self.session.execute(
            select(CompanyUser).where(
                CompanyUser.company_id == company_id,
                CompanyUser.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def _member_or_404(self, company_id: int, user_id: str) -> CompanyUser:
        member = await self._find_member(company_id, user_id)
        if member is None:
            raise NotFound("Company user not found")
        return member

    async def list_members(self, company_id: int) -> list[CompanyUser]:
        await self.get_company(company_id)
        result = await self.session.execute(
            select(CompanyUser)
            .where(CompanyUser.company_id == company_id)
            .order_by(CompanyUser.role, CompanyUser.user_id)
        )
        return list(result.scalars().all())

    async def add_member(self, company_id: int, user_id: str, role: str) -> CompanyUser:
        self._check_role(role)
        await self.get_company(company_id)
        if await self._find_member(company_id, user_id) is not None:
            raise ValidationError("User is already a member of this company")
        return await self._save(CompanyUser(company_id=company_id, user_id=user_id, role=role))

    async def change_member_role(self, company_id: int, user_id: str, role: str) -> CompanyUser:
        self._check_role(role)
        member = await self._member_or_404(company_id, user_id)
        member.role = role
        return await self._save(member)

    async def remove_member(self, company_id: int, user_id: str) -> CompanyUser:
        member = await self._member_or_404(company_id, user_id)
        await self._delete(member)
        return member

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def stats(self, company_id: int) -> CompanyStats:
        await self.get_company(company_id)

        drivers = (
            await self.session.execute(
                select(
                    func.count(Driver.id),
                    _count_where(Driver.status == "active"),
                    _count_where(Driver.type == "company"),
                    _count_where(Driver.type == "owner"),
                    _count_where(Driver.employment_type == "W2"),
                    _count_where(Driver.employment_type == "1099"),
                ).where(Driver.company_id == company_id)
            )
        ).one()

        payments = (
            await self.session.execute(
                select(
                    func.sum(Payment.amount),
                    func.sum(
                        case((func.lower(Payment.status) == "pending", Payment.amount), else_=0)
                    ),
                )
                .select_from(Payment)
                .join(Driver, Payment.driver_id == Driver.id)
                .where(Driver.company_id == company_id)
            )
        ).one()

        trip_earnings = await self.session.scalar(
            select(func.sum(Trip.amount))
            .select_from(Trip)
            .join(Driver, Trip.driver_id == Driver.id)
            .where(Driver.company_id == company_id)
        )

        loads = (
            await self.session.execute(
                select(
                    func.count(Load.id),
                    _count_where(Load.status == "assigned"),
                    _count_where(Load.status == "in_progress"),
                    _count_where(Load.status == "completed"),
                ).where(Load.company_id == company_id)
            )
        ).one()

        return CompanyStats(
            total_drivers=int(drivers[0]),
            active_drivers=int(drivers[1]),
            company_drivers=int(drivers[2]),
            owner_operators=int(drivers[3]),
            w2_drivers=int(drivers[4]),
            contractors=int(drivers[5]),
            total_payments=_money(payments[0]),
            pending_payments=_money(payments[1]),
            total_trip_earnings=_money(trip_earnings),
            total_loads=int(loads[0]),
            assigned_loads=int(loads[1]),
            in_progress_loads=int(loads[2]),
            completed_loads=int(loads[3]),
        )
