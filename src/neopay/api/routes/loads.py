"""Load API endpoints.

Reads are open to every role inside the caller's company. Writes need a
dispatching role. A status update is also allowed for the driver the load
is assigned to.
"""

import logging

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    ErrorResponse,
    LoadAssign,
    LoadCreate,
    LoadDeleted,
    LoadResponse,
    LoadStatusUpdate,
    LoadUpdate,
)
from neopay.auth import Entity, Operation, authorize, check_company_scope, is_in_company
from neopay.errors import Forbidden, ValidationError, storage_errors
from neopay.services.load_service import INVALID_STATUS_MESSAGE, LoadService
from neopay.services.state_machine import LoadStateMachine

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/loads",
    tags=["loads"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=list[LoadResponse])
async def list_loads(db: DbSession, caller: CurrentCaller) -> list[LoadResponse]:
    """Loads of the caller's company, or every load without a company claim."""
    authorize(caller, Entity.LOAD, Operation.READ)
    with storage_errors("Failed to fetch loads"):
        loads = await LoadService(db).list_loads(caller.company_id)
    return [LoadResponse.model_validate(load) for load in loads]


@router.get("/company/{company_id}", response_model=list[LoadResponse])
async def list_company_loads(
    company_id: int, db: DbSession, caller: CurrentCaller
) -> list[LoadResponse]:
    authorize(caller, Entity.LOAD, Operation.READ)
    check_company_scope(caller, company_id, "company")
    with storage_errors("Failed to fetch company loads"):
        loads = await LoadService(db).list_loads(company_id)
    return [LoadResponse.model_validate(load) for load in loads]


@router.get(
    "/driver/{driver_id}",
    response_model=list[LoadResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_driver_loads(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[LoadResponse]:
    authorize(caller, Entity.LOAD, Operation.READ)
    service = LoadService(db)
    with storage_errors("Failed to fetch driver loads"):
        driver = await service.get_driver(driver_id)
        check_company_scope(caller, driver.company_id, "driver")
        loads = await service.list_for_driver(driver_id)
    return [LoadResponse.model_validate(load) for load in loads]


@router.get(
    "/{load_id}",
    response_model=LoadResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_load(load_id: int, db: DbSession, caller: CurrentCaller) -> LoadResponse:
    authorize(caller, Entity.LOAD, Operation.READ)
    with storage_errors("Failed to fetch load"):
        load = await LoadService(db).get_load(load_id)
    check_company_scope(caller, load.company_id, "load")
    return LoadResponse.model_validate(load)


@router.post(
    "",
    response_model=LoadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_load(payload: LoadCreate, db: DbSession, caller: CurrentCaller) -> LoadResponse:
    """Create a load. ``companyId`` defaults to the caller's company."""
    authorize(caller, Entity.LOAD, Operation.CREATE)
    fields = payload.model_dump(exclude_unset=True)
    if fields.get("company_id") is None:
        fields["company_id"] = caller.company_id
    check_company_scope(caller, fields["company_id"], "company")

    with storage_errors("Failed to create load"):
        load = await LoadService(db).create_load(fields, created_by=caller.user_id)
        await db.commit()
    return LoadResponse.model_validate(load)


@router.put(
    "/{load_id}",
    response_model=LoadResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_load(
    load_id: int, payload: LoadUpdate, db: DbSession, caller: CurrentCaller
) -> LoadResponse:
    authorize(caller, Entity.LOAD, Operation.UPDATE)
    service = LoadService(db)
    with storage_errors("Failed to update load"):
        load = await service.get_load(load_id)
        check_company_scope(caller, load.company_id, "load")
        load = await service.update_load(load_id, payload.model_dump(exclude_unset=True))
        await db.commit()
    return LoadResponse.model_validate(load)


@router.delete(
    "/{load_id}",
    response_model=LoadDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_load(load_id: int, db: DbSession, caller: CurrentCaller) -> LoadDeleted:
    authorize(caller, Entity.LOAD, Operation.DELETE)
    service = LoadService(db)
    with storage_errors("Failed to delete load"):
        load = await service.get_load(load_id)
        check_company_scope(caller, load.company_id, "load")
        load = await service.delete_load(load_id)
        await db.commit()
    return LoadDeleted(message="Load deleted successfully", load=LoadResponse.model_validate(load))


@router.post(
    "/{load_id}/assign",
    response_model=LoadResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def assign_driver(
    load_id: int, payload: LoadAssign, db: DbSession, caller: CurrentCaller
) -> LoadResponse:
    """Assign a driver of the same company, or unassign with ``driverId: null``."""
    authorize(caller, Entity.LOAD, Operation.ASSIGN)
    service = LoadService(db)
    with storage_errors("Failed to assign driver"):
        load = await service.get_load(load_id)
        check_company_scope(caller, load.company_id, "load")
        load = await service.assign_driver(load, payload.driver_id)
        await db.commit()
    logger.info("Load %s assigned to driver %s by %s", load.id, load.driver_id, caller.user_id)
    return LoadResponse.model_validate(load)


@router.post(
    "/{load_id}/status",
    response_model=LoadResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_load_status(
    load_id: int, payload: LoadStatusUpdate, db: DbSession, caller: CurrentCaller
) -> LoadResponse:
    """Set a load's status.

    Any known status is accepted regardless of the current one; the usual
    flow is reported in ``nextStatuses``.
    """
    if not payload.status or not LoadStateMachine.is_valid_status(payload.status):
        raise ValidationError(INVALID_STATUS_MESSAGE)
    authorize(caller, Entity.LOAD, Operation.UPDATE_STATUS)

    service = LoadService(db)
    with storage_errors("Failed to update load status"):
        load = await service.get_load(load_id)
        if not (
            is_in_company(caller, load.company_id)
            or await service.is_assigned_driver(load, caller.user_id)
        ):
            raise Forbidden("Unauthorized access to load data")
        load = await service.set_status(load, payload.status)
        await db.commit()
    return LoadResponse.model_validate(load)
