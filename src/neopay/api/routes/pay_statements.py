"""Pay statement API endpoints.

Statements are generated as drafts, then finalized and paid. Only drafts
can be deleted.
"""

from fastapi import APIRouter, status

from neopay.api.dependencies import AppSettings, CurrentCaller, DbSession
from neopay.api.schemas import (
    ErrorResponse,
    GenerateStatementRequest,
    PayStatementDeleted,
    PayStatementResponse,
    PayStatementStatusUpdate,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.pay_statement_service import PayStatementService

router = APIRouter(
    prefix="/pay-statements",
    tags=["pay-statements"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.post(
    "/generate",
    response_model=PayStatementResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_pay_statement(
    payload: GenerateStatementRequest,
    db: DbSession,
    caller: CurrentCaller,
    settings: AppSettings,
) -> PayStatementResponse:
    authorize(caller, Entity.PAY_STATEMENT, Operation.GENERATE)
    with storage_errors("Failed to generate pay statement"):
        statement, _ = await PayStatementService(db).generate(
            driver_id=payload.driver_id,
            period_start=payload.period_start,
            period_end=payload.period_end,
            user_id=caller.user_id,
            default_tax_withholding_percent=settings.default_tax_withholding_percent,
            tax_withholding_percent=payload.tax_withholding_percent,
        )
        await db.commit()
    return PayStatementResponse.model_validate(statement)


@router.get("", response_model=list[PayStatementResponse])
async def list_pay_statements(db: DbSession, caller: CurrentCaller) -> list[PayStatementResponse]:
    authorize(caller, Entity.PAY_STATEMENT, Operation.LIST)
    with storage_errors("Failed to fetch pay statements"):
        statements = await PayStatementService(db).list_statements()
    return [PayStatementResponse.model_validate(s) for s in statements]


@router.get("/driver/{driver_id}", response_model=list[PayStatementResponse])
async def list_driver_pay_statements(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[PayStatementResponse]:
    authorize(caller, Entity.PAY_STATEMENT, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver pay statements"):
        statements = await PayStatementService(db).list_for_driver(driver_id)
    return [PayStatementResponse.model_validate(s) for s in statements]


@router.get(
    "/{statement_id}",
    response_model=PayStatementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_pay_statement(
    statement_id: int, db: DbSession, caller: CurrentCaller
) -> PayStatementResponse:
    authorize(caller, Entity.PAY_STATEMENT, Operation.READ)
    with storage_errors("Failed to fetch pay statement"):
        statement = await PayStatementService(db).get_statement(statement_id)
    authorize(caller, Entity.PAY_STATEMENT, Operation.READ, driver_id=statement.driver_id)
    return PayStatementResponse.model_validate(statement)


@router.post(
    "/{statement_id}/status",
    response_model=PayStatementResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_pay_statement_status(
    statement_id: int,
    payload: PayStatementStatusUpdate,
    db: DbSession,
    caller: CurrentCaller,
) -> PayStatementResponse:
    """Finalize or mark paid. Invalid transitions return 400."""
    authorize(caller, Entity.PAY_STATEMENT, Operation.UPDATE_STATUS)
    service = PayStatementService(db)
    with storage_errors("Failed to update pay statement status"):
        statement = await service.get_statement(statement_id)
        statement = await service.transition_status(statement, payload.status)
        await db.commit()
    return PayStatementResponse.model_validate(statement)


@router.delete(
    "/{statement_id}",
    response_model=PayStatementDeleted,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_pay_statement(
    statement_id: int, db: DbSession, caller: CurrentCaller
) -> PayStatementDeleted:
    authorize(caller, Entity.PAY_STATEMENT, Operation.DELETE)
    service = PayStatementService(db)
    with storage_errors("Failed to delete pay statement"):
        statement = await service.get_statement(statement_id)
        response = PayStatementResponse.model_validate(statement)
        await service.delete_statement(statement)
        await db.commit()
    return PayStatementDeleted(message="Pay statement deleted successfully", statement=response)
