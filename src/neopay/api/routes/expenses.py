"""Expense API endpoints."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    CategorySummaryResponse,
    DriverSummaryResponse,
    ErrorResponse,
    ExpenseCreate,
    ExpenseDeleted,
    ExpenseResponse,
    ExpenseUpdate,
)
from neopay.auth import Entity, Operation, authorize
from neopay.errors import storage_errors
from neopay.services.expense_service import ExpenseService
from neopay.services.receipt_service import ReceiptService

router = APIRouter(
    prefix="/expenses",
    tags=["expenses"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


@router.get("", response_model=list[ExpenseResponse])
async def list_expenses(db: DbSession, caller: CurrentCaller) -> list[ExpenseResponse]:
    authorize(caller, Entity.EXPENSE, Operation.LIST)
    with storage_errors("Failed to fetch expenses"):
        expenses = await ExpenseService(db).list_expenses()
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.get("/summary/by-category", response_model=list[CategorySummaryResponse])
async def summary_by_category(
    db: DbSession, caller: CurrentCaller
) -> list[CategorySummaryResponse]:
    authorize(caller, Entity.EXPENSE, Operation.SUMMARY)
    with storage_errors("Failed to summarize expenses"):
        rows = await ExpenseService(db).summary_by_category()
    return [CategorySummaryResponse.model_validate(row) for row in rows]


@router.get("/summary/by-driver", response_model=list[DriverSummaryResponse])
async def summary_by_driver(db: DbSession, caller: CurrentCaller) -> list[DriverSummaryResponse]:
    authorize(caller, Entity.EXPENSE, Operation.SUMMARY)
    with storage_errors("Failed to summarize expenses"):
        rows = await ExpenseService(db).summary_by_driver()
    return [DriverSummaryResponse.model_validate(row) for row in rows]


@router.get("/driver/{driver_id}", response_model=list[ExpenseResponse])
async def list_driver_expenses(
    driver_id: int, db: DbSession, caller: CurrentCaller
) -> list[ExpenseResponse]:
    authorize(caller, Entity.EXPENSE, Operation.READ, driver_id=driver_id)
    with storage_errors("Failed to fetch driver expenses"):
        expenses = await ExpenseService(db).list_for_driver(driver_id)
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.get("/category/{category}", response_model=list[ExpenseResponse])
async def list_category_expenses(
    category: str, db: DbSession, caller: CurrentCaller
) -> list[ExpenseResponse]:
    authorize(caller, Entity.EXPENSE, Operation.SUMMARY)
    with storage_errors("Failed to fetch category expenses"):
        expenses = await ExpenseService(db).list_for_category(category)
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.get(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_expense(expense_id: int, db: DbSession, caller: CurrentCaller) -> ExpenseResponse:
    authorize(caller, Entity.EXPENSE, Operation.READ)
    with storage_errors("Failed to fetch expense"):
        expense = await ExpenseService(db).get_expense(expense_id)
    authorize(caller, Entity.EXPENSE, Operation.READ, driver_id=expense.driver_id)
    return ExpenseResponse.model_validate(expense)


@router.post(
    "",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_expense(
    payload: ExpenseCreate, db: DbSession, caller: CurrentCaller
) -> ExpenseResponse:
    authorize(caller, Entity.EXPENSE, Operation.CREATE, driver_id=payload.driver_id)
    with storage_errors("Failed to create expense"):
        expense = await ExpenseService(db).create_expense(
            payload.model_dump(exclude_unset=True), user_id=caller.user_id
        )
        await db.commit()
    return ExpenseResponse.model_validate(expense)


@router.post(
    "/from-receipt/{receipt_id}",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_expense_from_receipt(
    receipt_id: int, db: DbSession, caller: CurrentCaller
) -> ExpenseResponse:
    """Create an expense from a receipt's extracted vendor, date, amount and category."""
    authorize(caller, Entity.EXPENSE, Operation.CREATE)
    with storage_errors("Failed to create expense from receipt"):
        receipt = await ReceiptService(db).get_receipt(receipt_id)
        authorize(caller, Entity.EXPENSE, Operation.CREATE, driver_id=receipt.driver_id)
        expense = await ExpenseService(db).create_from_receipt(receipt, user_id=caller.user_id)
        await db.commit()
    return ExpenseResponse.model_validate(expense)


@router.put(
    "/{expense_id}",
    response_model=ExpenseResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_expense(
    expense_id: int, payload: ExpenseUpdate, db: DbSession, caller: CurrentCaller
) -> ExpenseResponse:
    authorize(caller, Entity.EXPENSE, Operation.UPDATE)
    service = ExpenseService(db)
    with storage_errors("Failed to update expense"):
        expense = await service.get_expense(expense_id)
        authorize(caller, Entity.EXPENSE, Operation.UPDATE, driver_id=expense.driver_id)
        expense = await service.update_expense(expense, payload.model_dump(exclude_unset=True))
        await db.commit()
    return ExpenseResponse.model_validate(expense)


@router.delete(
    "/{expense_id}",
    response_model=ExpenseDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_expense(expense_id: int, db: DbSession, caller: CurrentCaller) -> ExpenseDeleted:
    authorize(caller, Entity.EXPENSE, Operation.DELETE)
    service = ExpenseService(db)
    with storage_errors("Failed to delete expense"):
        expense = await service.get_expense(expense_id)
        authorize(caller, Entity.EXPENSE, Operation.DELETE, driver_id=expense.driver_id)
        expense = await service.delete_expense(expense)
        await db.commit()
    return ExpenseDeleted(
        message="Expense deleted successfully",
        expense=ExpenseResponse.model_validate(expense),
    )
