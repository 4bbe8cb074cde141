"""Receipt API endpoints.

Uploading stores the image, answers with the receipt in ``Processing`` and
hands extraction to the background processor.
"""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession, Processor, Storage
from neopay.api.schemas import (
    ErrorResponse,
    ReceiptDeleted,
    ReceiptResponse,
    ReceiptUpdate,
    ReceiptUpload,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.receipt_service import ReceiptService

router = APIRouter(
    prefix="/receipts",
    tags=["receipts"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=list[ReceiptResponse])
async def list_receipts(db: DbSession, caller: CurrentCaller) -> list[ReceiptResponse]:
    authorize(caller, Entity.RECEIPT, Operation.LIST)
    with storage_errors("Failed to fetch receipts"):
        receipts = await ReceiptService(db).list_receipts()
    return [ReceiptResponse.model_validate(r) for r in receipts]


@router.get("/driver/{driver_id}", response_model=list[ReceiptResponse])
async def list_driver_receipts(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[ReceiptResponse]:
    authorize(caller, Entity.RECEIPT, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver receipts"):
        receipts = await ReceiptService(db).list_for_driver(driver_id)
    return [ReceiptResponse.model_validate(r) for r in receipts]


@router.get(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_receipt(receipt_id: int, db: DbSession, caller: CurrentCaller) -> ReceiptResponse:
    authorize(caller, Entity.RECEIPT, Operation.READ)
    with storage_errors("Failed to fetch receipt"):
        receipt = await ReceiptService(db).get_receipt(receipt_id)
    authorize(caller, Entity.RECEIPT, Operation.READ, driver_id=receipt.driver_id)
    return ReceiptResponse.model_validate(receipt)


@router.post(
    "/upload",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def upload_receipt(
    payload: ReceiptUpload,
    db: DbSession,
    caller: CurrentCaller,
    storage: Storage,
    processor: Processor,
) -> ReceiptResponse:
    authorize(caller, Entity.RECEIPT, Operation.CREATE, driver_id=payload.driver_id)
    with storage_errors("Failed to upload receipt"):
        receipt, content, content_type = await ReceiptService(db).upload_receipt(
            storage,
            driver_id=payload.driver_id,
            file_name=payload.file_name,
            file_data=payload.file_data,
            user_id=caller.user_id,
        )
        await db.commit()

    response = ReceiptResponse.model_validate(receipt)
    processor.submit(receipt.id, content, content_type)
    return response


@router.put(
    "/{receipt_id}",
    response_model=ReceiptResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_receipt(
    receipt_id: int, payload: ReceiptUpdate, db: DbSession, caller: CurrentCaller
) -> ReceiptResponse:
    authorize(caller, Entity.RECEIPT, Operation.UPDATE)
    service = ReceiptService(db)
    with storage_errors("Failed to update receipt"):
        receipt = await service.get_receipt(receipt_id)
        authorize(caller, Entity.RECEIPT, Operation.UPDATE, driver_id=receipt.driver_id)
        receipt = await service.update_receipt(receipt, payload.model_dump(exclude_unset=True))
        await db.commit()
    return ReceiptResponse.model_validate(receipt)


@router.delete(
    "/{receipt_id}",
    response_model=ReceiptDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_receipt(
    receipt_id: int, db: DbSession, caller: CurrentCaller, storage: Storage
) -> ReceiptDeleted:
    """Delete the receipt, its extracted items and the stored image."""
    authorize(caller, Entity.RECEIPT, Operation.DELETE)
    service = ReceiptService(db)
    with storage_errors("Failed to delete receipt"):
        receipt = await service.get_receipt(receipt_id)
        authorize(caller, Entity.RECEIPT, Operation.DELETE, driver_id=receipt.driver_id)
        response = ReceiptResponse.model_validate(receipt)
        await service.delete_receipt(receipt, storage)
        await db.commit()
    return ReceiptDeleted(message="Receipt deleted successfully", receipt=response)
