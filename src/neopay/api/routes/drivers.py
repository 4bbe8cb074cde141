"""Driver API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    DriverCreate,
    DriverDeleted,
    DriverResponse,
    DriverUpdate,
    ErrorResponse,
    TripResponse,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.driver_service import DriverService
from neopay.services.trip_service import TripService

router = APIRouter(
    prefix="/drivers",
    tags=["drivers"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=list[DriverResponse])
async def list_drivers(db: DbSession, caller: CurrentCaller) -> list[DriverResponse]:
    authorize(caller, Entity.DRIVER, Operation.LIST)
    with storage_errors("Failed to fetch drivers"):
        drivers = await DriverService(db).list_drivers()
    return [DriverResponse.model_validate(d) for d in drivers]


@router.get(
    "/{driver_id}",
    response_model=DriverResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_driver(driver_id: int, db: DbSession, caller: CurrentCaller) -> DriverResponse:
    """Admins and managers see any driver; drivers and owners only themselves."""
    authorize(caller, Entity.DRIVER, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver"):
        driver = await DriverService(db).get_driver(driver_id)
    return DriverResponse.model_validate(driver)


@router.post(
    "",
    response_model=DriverResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_driver(
    payload: DriverCreate, db: DbSession, caller: CurrentCaller
) -> DriverResponse:
    """Create a driver. Pay rate type and employment type default from ``type``."""
    authorize(caller, Entity.DRIVER, Operation.CREATE)
    with storage_errors("Failed to create driver"):
        driver = await DriverService(db).create_driver(
            payload.model_dump(exclude_unset=True), company_id=caller.company_id
        )
        await db.commit()
    return DriverResponse.model_validate(driver)


@router.put(
    "/{driver_id}",
    response_model=DriverResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_driver(
    driver_id: int, payload: DriverUpdate, db: DbSession, caller: CurrentCaller
) -> DriverResponse:
    authorize(caller, Entity.DRIVER, Operation.UPDATE, driver_id=driver_id)
    with storage_errors("Failed to update driver"):
        driver = await DriverService(db).update_driver(
            driver_id, payload.model_dump(exclude_unset=True)
        )
        await db.commit()
    return DriverResponse.model_validate(driver)


@router.delete(
    "/{driver_id}",
    response_model=DriverDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_driver(driver_id: int, db: DbSession, caller: CurrentCaller) -> DriverDeleted:
    authorize(caller, Entity.DRIVER, Operation.DELETE)
    with storage_errors("Failed to delete driver"):
        driver = await DriverService(db).delete_driver(driver_id)
        await db.commit()
    return DriverDeleted(
        message="Driver deleted successfully",
        driver=DriverResponse.model_validate(driver),
    )


@router.get(
    "/{driver_id}/trips",
    response_model=list[TripResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_driver_trips(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[TripResponse]:
    authorize(caller, Entity.TRIP, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver trips"):
        await DriverService(db).get_driver(driver_id)
        trips = await TripService(db).list_for_driver(driver_id)
    return [TripResponse.model_validate(t) for t in trips]
