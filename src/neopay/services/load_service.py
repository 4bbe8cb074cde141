"""Load service.

Status changes accept any of the four load statuses regardless of the
current one; ``LoadStateMachine`` only describes the graph for clients.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select

from neopay.errors import NotFound, ValidationError
from neopay.models import Driver, Load
from neopay.services.base import EntityService
from neopay.services.state_machine import LoadStateMachine, LoadStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {
        "driver_id",
        "load_number",
        "customer",
        "pickup_date",
        "delivery_date",
        "origin",
        "destination",
        "distance",
        "rate",
        "status",
    }
)

INVALID_STATUS_MESSAGE = (
    "Invalid status. Must be one of: assigned, in_progress, completed, cancelled"
)


class LoadService(EntityService):
    """Load CRUD, driver assignment and status updates."""

    async def list_loads(self, company_id: int | None = None) -> list[Load]:
        stmt = select(Load)
        if company_id is not None:
            stmt = stmt.where(Load.company_id == company_id)
        result = await self.session.execute(stmt.order_by(Load.created_at.desc(), Load.id.desc()))
        return list(result.scalars().all())

    async def list_for_driver(self, driver_id: int) -> list[Load]:
        result = await self.session.execute(
            select(Load)
            .where(Load.driver_id == driver_id)
            .order_by(Load.created_at.desc(), Load.id.desc())
        )
        return list(result.scalars().all())

    async def get_load(self, load_id: int) -> Load:
        return await self._get_or_404(Load, load_id, "Load")

    async def get_driver(self, driver_id: int) -> Driver:
        driver = await self.session.get(Driver, driver_id)
        if driver is None:
            raise NotFound("Driver not found")
        return driver

    async def _check_driver_company(self, driver_id: int | None, company_id: int) -> None:
        if driver_id is None:
            return
        driver = await self.get_driver(driver_id)
        if driver.company_id != company_id:
            raise ValidationError("Driver does not belong to the same company as the load")

    @staticmethod
    def _check_status(status: str | None) -> None:
        if status is not None and not LoadStateMachine.is_valid_status(status):
            raise ValidationError(INVALID_STATUS_MESSAGE)

    async def create_load(self, fields: dict[str, Any], created_by: str) -> Load:
        company_id = fields.get("company_id")
        if company_id is None:
            raise ValidationError("Missing required fields: companyId")
        self._check_status(fields.get("status"))
        await self._check_driver_company(fields.get("driver_id"), company_id)

        load = Load(
            company_id=company_id,
            created_by=created_by,
            status=fields.get("status") or LoadStatus.ASSIGNED.value,
        )
        self._apply(load, {k: v for k, v in fields.items() if k != "status"}, UPDATABLE_FIELDS)
        return await self._save(load)

    async def update_load(self, load_id: int, fields: dict[str, Any]) -> Load:
        load = await self.get_load(load_id)
        self._check_status(fields.get("status"))
        if fields.get("driver_id") is not None:
            await self._check_driver_company(fields["driver_id"], load.company_id)
        self._apply(load, fields, UPDATABLE_FIELDS)
        return await self._save(load)

    async def delete_load(self, load_id: int) -> Load:
        load = await self.get_load(load_id)
        await self._delete(load)
        return load

    async def assign_driver(self, load: Load, driver_id: int | None) -> Load:
        """Assign or unassign a driver. The driver must share the load's company."""
        await self._check_driver_company(driver_id, load.company_id)
        load.driver_id = driver_id
        return await self._save(load)

    async def set_status(self, load: Load, status: str) -> Load:
        self._check_status(status)
        if not status:
            raise ValidationError(INVALID_STATUS_MESSAGE)

        if load.status != status and not LoadStateMachine.can_transition(load.status, status):
            logger.info(
                "Load %s moved %s -> %s outside the usual status flow",
                load.id, load.status, status,
            )
        load.status = status
        return await self._save(load)

    async def is_assigned_driver(self, load: Load, user_id: str) -> bool:
        """True when ``user_id`` is the identity of the load's assigned driver."""
        if load.driver_id is None:
            return False
        driver = await self.session.get(Driver, load.driver_id)
        return driver is not None and driver.user_id == user_id
