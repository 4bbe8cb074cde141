"""Payment API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import AppSettings, CurrentCaller, DbSession
from neopay.api.schemas import (
    ErrorResponse,
    ExpenseResponse,
    GeneratedStatementResponse,
    GenerateStatementRequest,
    PayStatementResponse,
    PaymentCreate,
    PaymentDeleted,
    PaymentResponse,
    PaymentUpdate,
    TripResponse,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.pay_statement_service import PayStatementService
from neopay.services.payment_service import PaymentService

router = APIRouter(
    prefix="/payments",
    tags=["payments"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=list[PaymentResponse])
async def list_payments(db: DbSession, caller: CurrentCaller) -> list[PaymentResponse]:
    authorize(caller, Entity.PAYMENT, Operation.LIST)
    with storage_errors("Failed to fetch payments"):
        payments = await PaymentService(db).list_payments()
    return [PaymentResponse.model_validate(p) for p in payments]


@router.get("/driver/{driver_id}", response_model=list[PaymentResponse])
async def list_driver_payments(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[PaymentResponse]:
    authorize(caller, Entity.PAYMENT, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver payments"):
        payments = await PaymentService(db).list_for_driver(driver_id)
    return [PaymentResponse.model_validate(p) for p in payments]


@router.get(
    "/{payment_id}",
    response_model=PaymentResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payment(payment_id: int, db: DbSession, caller: CurrentCaller) -> PaymentResponse:
    authorize(caller, Entity.PAYMENT, Operation.READ)
    with storage_errors("Failed to fetch payment"):
        payment = await PaymentService(db).get_payment(payment_id)
    authorize(caller, Entity.PAYMENT, Operation.READ, driver_id=payment.driver_id)
    return PaymentResponse.model_validate(payment)


@router.post(
    "",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_payment(
    payload: PaymentCreate, db: DbSession, caller: CurrentCaller
) -> PaymentResponse:
    authorize(caller, Entity.PAYMENT, Operation.CREATE)
    with storage_errors("Failed to create payment"):
        payment = await PaymentService(db).create_payment(
            payload.model_dump(exclude_unset=True), user_id=caller.user_id
        )
        await db.commit()
    return PaymentResponse.model_validate(payment)


@router.post(
    "/generate-statement",
    response_model=GeneratedStatementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_statement(
    payload: GenerateStatementRequest,
    db: DbSession,
    caller: CurrentCaller,
    settings: AppSettings,
) -> GeneratedStatementResponse:
    """Generate a pay statement and a Pending payment for its net pay.

    The response also lists the trips and expenses the statement covers.
    """
    authorize(caller, Entity.PAYMENT, Operation.GENERATE)
    with storage_errors("Failed to generate statement"):
        statement, activity = await PayStatementService(db).generate(
            driver_id=payload.driver_id,
            period_start=payload.period_start,
            period_end=payload.period_end,
            user_id=caller.user_id,
            default_tax_withholding_percent=settings.default_tax_withholding_percent,
            tax_withholding_percent=payload.tax_withholding_percent,
        )
        payment = await PaymentService(db).create_for_statement(statement, caller.user_id)
        await db.commit()

    return GeneratedStatementResponse(
        statement=PayStatementResponse.model_validate(statement),
        payment=PaymentResponse.model_validate(payment),
        trips=[TripResponse.model_validate(t) for t in activity.trips],
        expenses=[ExpenseResponse.model_validate(e) for e in activity.expenses],
    )


@router.put(
    "/{payment_id}",
    response_model=PaymentResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payment(
    payment_id: int, payload: PaymentUpdate, db: DbSession, caller: CurrentCaller
) -> PaymentResponse:
    authorize(caller, Entity.PAYMENT, Operation.UPDATE)
    with storage_errors("Failed to update payment"):
        payment = await PaymentService(db).update_payment(
            payment_id, payload.model_dump(exclude_unset=True)
        )
        await db.commit()
    return PaymentResponse.model_validate(payment)


@router.delete(
    "/{payment_id}",
    response_model=PaymentDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_payment(payment_id: int, db: DbSession, caller: CurrentCaller) -> PaymentDeleted:
    authorize(caller, Entity.PAYMENT, Operation.DELETE)
    with storage_errors("Failed to delete payment"):
        payment = await PaymentService(db).delete_payment(payment_id)
        await db.commit()
    return PaymentDeleted(
        message="Payment deleted successfully",
        payment=PaymentResponse.model_validate(payment),
    )
