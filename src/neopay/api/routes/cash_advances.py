"""Cash advance API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    CashAdvanceCreate,
    CashAdvanceDeleted,
    CashAdvanceResponse,
    ErrorResponse,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.cash_advance_service import CashAdvanceService

router = APIRouter(
    prefix="/cash-advances",
    tags=["cash-advances"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("/driver/{driver_id}", response_model=list[CashAdvanceResponse])
async def list_driver_cash_advances(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[CashAdvanceResponse]:
    authorize(caller, Entity.CASH_ADVANCE, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch cash advances"):
        advances = await CashAdvanceService(db).list_for_driver(driver_id)
    return [CashAdvanceResponse.model_validate(a) for a in advances]


@router.post(
    "",
    response_model=CashAdvanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_cash_advance(
    payload: CashAdvanceCreate, db: DbSession, caller: CurrentCaller
) -> CashAdvanceResponse:
    authorize(caller, Entity.CASH_ADVANCE, Operation.CREATE)
    with storage_errors("Failed to create cash advance"):
        advance = await CashAdvanceService(db).create_cash_advance(
            payload.model_dump(exclude_unset=True)
        )
        await db.commit()
    return CashAdvanceResponse.model_validate(advance)


@router.delete(
    "/{advance_id}",
    response_model=CashAdvanceDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_cash_advance(
    advance_id: int, db: DbSession, caller: CurrentCaller
) -> CashAdvanceDeleted:
    authorize(caller, Entity.CASH_ADVANCE, Operation.DELETE)
    with storage_errors("Failed to delete cash advance"):
        advance = await CashAdvanceService(db).delete_cash_advance(advance_id)
        await db.commit()
    return CashAdvanceDeleted(
        message="Cash advance deleted successfully",
        cash_advance=CashAdvanceResponse.model_validate(advance),
    )
