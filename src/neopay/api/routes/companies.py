"""Company API endpoints: tenants, their members and dashboard stats."""

from fastapi import APIRouter, status

from neopay.api.dependencies import CurrentCaller, DbSession
from neopay.api.schemas import (
    CompanyCreate,
    CompanyDeleted,
    CompanyResponse,
    CompanyStatsResponse,
    CompanyUpdate,
    CompanyUserCreate,
    CompanyUserRemoved,
    CompanyUserResponse,
    CompanyUserRoleUpdate,
    ErrorResponse,
)
from neopay.auth import Entity, Operation, authorize, check_company_scope
from neopay.errors import storage_errors
from neopay.services.company_service import CompanyService

router = APIRouter(
    prefix="/companies",
    tags=["companies"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


# ============================================================================
# Companies
# ============================================================================


@router.get("", response_model=list[CompanyResponse])
async def list_companies(db: DbSession, caller: CurrentCaller) -> list[CompanyResponse]:
    """Companies the caller owns, belongs to or is scoped to."""
    authorize(caller, Entity.COMPANY, Operation.LIST)
    with storage_errors("Failed to fetch companies"):
        companies = await CompanyService(db).list_for_user(caller.user_id, caller.company_id)
    return [CompanyResponse.model_validate(c) for c in companies]


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_company(company_id: int, db: DbSession, caller: CurrentCaller) -> CompanyResponse:
    authorize(caller, Entity.COMPANY, Operation.READ)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to fetch company"):
        company = await CompanyService(db).get_company(company_id)
    return CompanyResponse.model_validate(company)


@router.post(
    "",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_company(
    payload: CompanyCreate, db: DbSession, caller: CurrentCaller
) -> CompanyResponse:
    authorize(caller, Entity.COMPANY, Operation.CREATE)
    with storage_errors("Failed to create company"):
        company = await CompanyService(db).create_company(
            payload.model_dump(exclude_unset=True), owner_id=caller.user_id
        )
        await db.commit()
    return CompanyResponse.model_validate(company)


@router.put(
    "/{company_id}",
    response_model=CompanyResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_company(
    company_id: int, payload: CompanyUpdate, db: DbSession, caller: CurrentCaller
) -> CompanyResponse:
    authorize(caller, Entity.COMPANY, Operation.UPDATE)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to update company"):
        company = await CompanyService(db).update_company(
            company_id, payload.model_dump(exclude_unset=True)
        )
        await db.commit()
    return CompanyResponse.model_validate(company)


@router.delete(
    "/{company_id}",
    response_model=CompanyDeleted,
    responses={404: {"model": ErrorResponse}},
)
async def delete_company(company_id: int, db: DbSession, caller: CurrentCaller) -> CompanyDeleted:
    """Delete a company. Its drivers and memberships go with it."""
    authorize(caller, Entity.COMPANY, Operation.DELETE)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to delete company"):
        company = await CompanyService(db).delete_company(company_id)
        await db.commit()
    return CompanyDeleted(
        message="Company deleted successfully",
        company=CompanyResponse.model_validate(company),
    )


@router.get(
    "/{company_id}/stats",
    response_model=CompanyStatsResponse,
    responses={404: {"model": ErrorResponse}},
)
async def company_stats(
    company_id: int, db: DbSession, caller: CurrentCaller
) -> CompanyStatsResponse:
    """Driver, payment, earning and load counts for the dashboard."""
    authorize(caller, Entity.COMPANY, Operation.SUMMARY)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to fetch company statistics"):
        stats = await CompanyService(db).stats(company_id)
    return CompanyStatsResponse.model_validate(stats)


# ============================================================================
# Members
# ============================================================================


@router.get(
    "/{company_id}/users",
    response_model=list[CompanyUserResponse],
    responses={404: {"model": ErrorResponse}},
)
async def list_company_users(
    company_id: int, db: DbSession, caller: CurrentCaller
) -> list[CompanyUserResponse]:
    authorize(caller, Entity.COMPANY_USER, Operation.READ)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to fetch company users"):
        members = await CompanyService(db).list_members(company_id)
    return [CompanyUserResponse.model_validate(m) for m in members]


@router.post(
    "/{company_id}/users",
    response_model=CompanyUserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_company_user(
    company_id: int, payload: CompanyUserCreate, db: DbSession, caller: CurrentCaller
) -> CompanyUserResponse:
    authorize(caller, Entity.COMPANY_USER, Operation.CREATE)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to add user to company"):
        member = await CompanyService(db).add_member(company_id, payload.user_id, payload.role)
        await db.commit()
    return CompanyUserResponse.model_validate(member)


@router.put(
    "/{company_id}/users/{user_id}",
    response_model=CompanyUserResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def change_company_user_role(
    company_id: int,
    user_id: str,
    payload: CompanyUserRoleUpdate,
    db: DbSession,
    caller: CurrentCaller,
) -> CompanyUserResponse:
    authorize(caller, Entity.COMPANY_USER, Operation.UPDATE)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to update user role"):
        member = await CompanyService(db).change_member_role(company_id, user_id, payload.role)
        await db.commit()
    return CompanyUserResponse.model_validate(member)


@router.delete(
    "/{company_id}/users/{user_id}",
    response_model=CompanyUserRemoved,
    responses={404: {"model": ErrorResponse}},
)
async def remove_company_user(
    company_id: int, user_id: str, db: DbSession, caller: CurrentCaller
) -> CompanyUserRemoved:
    authorize(caller, Entity.COMPANY_USER, Operation.DELETE)
    check_company_scope(caller, company_id)
    with storage_errors("Failed to remove user from company"):
        member = await CompanyService(db).remove_member(company_id, user_id)
        await db.commit()
    return CompanyUserRemoved(
        message="User removed from company successfully",
        member=CompanyUserResponse.model_validate(member),
    )
