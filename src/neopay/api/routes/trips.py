"""Trip API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    ErrorResponse,
    TripCreate,
    TripDeleted,
    TripResponse,
    TripStatsResponse,
    TripUpdate,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.trip_service import TripService

router = APIRouter(
    prefix="/trips",
    tags=["trips"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


# ============================================================================
# Reads
# ============================================================================


@router.get("", response_model=list[TripResponse])
async def list_trips(db: DbSession, caller: CurrentCaller) -> list[TripResponse]:
    authorize(caller, Entity.TRIP, Operation.LIST)
    with storage_errors("Failed to fetch trips"):
        trips = await TripService(db).list_trips()
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/driver/{driver_id}", response_model=list[TripResponse])
async def list_driver_trips(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[TripResponse]:
    authorize(caller, Entity.TRIP, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver trips"):
        trips = await TripService(db).list_for_driver(driver_id)
    return [TripResponse.model_validate(t) for t in trips]


@router.get("/stats/driver/{driver_id}", response_model=TripStatsResponse)
async def driver_trip_stats(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> TripStatsResponse:
    """Trip count, miles, earnings and average earnings per mile."""
    authorize(caller, Entity.TRIP, Operation.SUMMARY, driver_id=driver_id)
    with storage_errors("Failed to fetch trip statistics"):
        stats = await TripService(db).driver_stats(driver_id)
    return TripStatsResponse.model_validate(stats)


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_trip(trip_id: int, db: DbSession, caller: CurrentCaller) -> TripResponse:
    authorize(caller, Entity.TRIP, Operation.READ)
    with storage_errors("Failed to fetch trip"):
        trip = await TripService(db).get_trip(trip_id)
    authorize(caller, Entity.TRIP, Operation.READ, driver_id=trip.driver_id)
    return TripResponse.model_validate(trip)


# ============================================================================
# Writes (admin and manager)
# ============================================================================


@router.post(
    "",
    response_model=TripResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_trip(payload: TripCreate, db: DbSession, caller: CurrentCaller) -> TripResponse:
    """Create a trip. Without ``rateType`` the driver's type decides it."""
    authorize(caller, Entity.TRIP, Operation.CREATE)
    with storage_errors("Failed to create trip"):
        trip = await TripService(db).create_trip(payload.model_dump(exclude_unset=True))
        await db.commit()
    return TripResponse.model_validate(trip)


@router.put(
    "/{trip_id}",
    response_model=TripResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_trip(
    trip_id: int, payload: TripUpdate, db: DbSession, caller: CurrentCaller
) -> TripResponse:
    authorize(caller, Entity.TRIP, Operation.UPDATE)
    with storage_errors("Failed to update trip"):
        trip = await TripService(db).update_trip(trip_id, payload.model_dump(exclude_unset=True))
        await db.commit()
    return TripResponse.model_validate(trip)


@router.delete(
    "/{trip_id}",
    response_model=TripDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_trip(trip_id: int, db: DbSession, caller: CurrentCaller) -> TripDeleted:
    authorize(caller, Entity.TRIP, Operation.DELETE)
    with storage_errors("Failed to delete trip"):
        trip = await TripService(db).delete_trip(trip_id)
        await db.commit()
    return TripDeleted(message="Trip deleted successfully", trip=TripResponse.model_validate(trip))
