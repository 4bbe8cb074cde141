"""Deduction API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    DeductionCreate,
    DeductionDeleted,
    DeductionResponse,
    ErrorResponse,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.deduction_service import DeductionService

router = APIRouter(
    prefix="/deductions",
    tags=["deductions"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("/driver/{driver_id}", response_model=list[DeductionResponse])
async def list_driver_deductions(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[DeductionResponse]:
    authorize(caller, Entity.DEDUCTION, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch deductions"):
        deductions = await DeductionService(db).list_for_driver(driver_id)
    return [DeductionResponse.model_validate(d) for d in deductions]


@router.post(
    "",
    response_model=DeductionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_deduction(
    payload: DeductionCreate, db: DbSession, caller: CurrentCaller
) -> DeductionResponse:
    authorize(caller, Entity.DEDUCTION, Operation.CREATE)
    with storage_errors("Failed to create deduction"):
        deduction = await DeductionService(db).create_deduction(
            payload.model_dump(exclude_unset=True)
        )
        await db.commit()
    return DeductionResponse.model_validate(deduction)


@router.delete(
    "/{deduction_id}",
    response_model=DeductionDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_deduction(
    deduction_id: int, db: DbSession, caller: CurrentCaller
) -> DeductionDeleted:
    authorize(caller, Entity.DEDUCTION, Operation.DELETE)
    with storage_errors("Failed to delete deduction"):
        deduction = await DeductionService(db).delete_deduction(deduction_id)
        await db.commit()
    return DeductionDeleted(
        message="Deduction deleted successfully",
        deduction=DeductionResponse.model_validate(deduction),
    )
