"""Driver service."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select

from neopay.calculators import DriverType, default_employment_type, default_rate_type
from neopay.errors import ValidationError
from neopay.models import Driver
from neopay.services.base import EntityService

DEFAULT_TAX_WITHHOLDING_PERCENT = Decimal("15")

REQUIRED_FIELDS = ("name", "email", "phone", "license")

UPDATABLE_FIELDS = frozenset(
    {
        "company_id",
        "name",
        "email",
        "phone",
        "license",
        "status",
        "type",
        "employment_type",
        "join_date",
        "pay_rate",
        "pay_rate_type",
        "tax_withholding_percent",
        "has_benefits",
        "user_id",
    }
)


class DriverService(EntityService):
    """Create, read, update and delete drivers.

    ``type`` fills in ``pay_rate_type`` and ``employment_type`` whenever they
    are not given explicitly, both on create and when ``type`` changes.
    """

    async def list_drivers(self) -> list[Driver]:
        result = await self.session.execute(select(Driver).order_by(Driver.name))
        return list(result.scalars().all())

    async def get_driver(self, driver_id: int) -> Driver:
        return await self._get_or_404(Driver, driver_id, "Driver")

    async def get_driver_for_user(self, user_id: str) -> Driver | None:
        """The driver record linked to an identity, if any."""
        result = await self.session.execute(
            select(Driver).where(Driver.user_id == user_id).order_by(Driver.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def create_driver(
        self, fields: dict[str, Any], company_id: int | None = None
    ) -> Driver:
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError("Missing required fields")

        driver_type = DriverType(fields.get("type") or DriverType.COMPANY)
        tax_percent = fields.get("tax_withholding_percent")
        has_benefits = fields.get("has_benefits")

        driver = Driver(
            company_id=fields.get("company_id") or company_id,
            name=fields["name"],
            email=fields["email"],
            phone=fields["phone"],
            license=fields["license"],
            status=fields.get("status") or "active",
            type=driver_type.value,
            employment_type=(
                fields.get("employment_type") or default_employment_type(driver_type).value
            ),
            join_date=fields.get("join_date") or date.today(),
            pay_rate=fields.get("pay_rate"),
            pay_rate_type=fields.get("pay_rate_type") or default_rate_type(driver_type).value,
            tax_withholding_percent=(
                tax_percent if tax_percent is not None else DEFAULT_TAX_WITHHOLDING_PERCENT
            ),
            has_benefits=(
                has_benefits if has_benefits is not None else driver_type is DriverType.COMPANY
            ),
            user_id=fields.get("user_id"),
        )
        return await self._save(driver)

    async def update_driver(self, driver_id: int, fields: dict[str, Any]) -> Driver:
        driver = await self.get_driver(driver_id)

        new_type = fields.get("type")
        if new_type and new_type != driver.type:
            driver_type = DriverType(new_type)
            fields.setdefault("pay_rate_type", default_rate_type(driver_type).value)
            fields.setdefault("employment_type", default_employment_type(driver_type).value)

        self._apply(driver, fields, UPDATABLE_FIELDS)
        return await self._save(driver)

    async def delete_driver(self, driver_id: int) -> Driver:
        driver = await self.get_driver(driver_id)
        await self._delete(driver)
        return driver
