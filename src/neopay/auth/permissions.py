"""Declarative permission table and the authorization function.

Every guarded operation is a (Entity, Operation) pair mapped to the roles
that may perform it and how far their access reaches:

- FULL: any record, no driver scope
- OWN:  only records belonging to the caller's own driver record

``authorize()`` is the single place these rules are evaluated.
"""

from __future__ import annotations

import logging
from enum import Enum

from neopay.auth.identity import CallerIdentity
from neopay.auth.roles import Role
from neopay.errors import Forbidden

logger = logging.getLogger(__name__)


INSUFFICIENT_PERMISSIONS = "Forbidden - Insufficient permissions"
NO_DRIVER_RECORD = "Forbidden - No driver record found for this user"
OWN_DATA_ONLY = "Forbidden - You can only access your own data"


class Entity(str, Enum):
    COMPANY = "company"
    COMPANY_USER = "company_user"
    DRIVER = "driver"
    TRIP = "trip"
    LOAD = "load"
    EXPENSE = "expense"
    RECEIPT = "receipt"
    PAYMENT = "payment"
    PAY_STATEMENT = "pay_statement"
    CASH_ADVANCE = "cash_advance"
    DEDUCTION = "deduction"


class Operation(str, Enum):
    LIST = "list"  # Unscoped collection read
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SUMMARY = "summary"
    ASSIGN = "assign"
    UPDATE_STATUS = "update_status"
    GENERATE = "generate"


class Access(str, Enum):
    FULL = "full"
    OWN = "own"


RoleAccess = dict[Role, Access]

ADMINS: RoleAccess = {Role.ADMIN: Access.FULL}
MANAGERS: RoleAccess = {**ADMINS, Role.MANAGER: Access.FULL}
MANAGERS_OR_SELF: RoleAccess = {
    **MANAGERS,
    Role.DRIVER: Access.OWN,
    Role.OWNER: Access.OWN,
}
ANY_ROLE: RoleAccess = {role: Access.FULL for role in Role}


PERMISSIONS: dict[tuple[Entity, Operation], RoleAccess] = {
    # Companies and memberships; company scope is checked separately
    (Entity.COMPANY, Operation.LIST): ANY_ROLE,
    (Entity.COMPANY, Operation.READ): ANY_ROLE,
    (Entity.COMPANY, Operation.CREATE): ADMINS,
    (Entity.COMPANY, Operation.UPDATE): MANAGERS,
    (Entity.COMPANY, Operation.DELETE): ADMINS,
    (Entity.COMPANY, Operation.SUMMARY): MANAGERS,
    (Entity.COMPANY_USER, Operation.READ): MANAGERS,
    (Entity.COMPANY_USER, Operation.CREATE): ADMINS,
    (Entity.COMPANY_USER, Operation.UPDATE): ADMINS,
    (Entity.COMPANY_USER, Operation.DELETE): ADMINS,
    # Drivers
    (Entity.DRIVER, Operation.LIST): MANAGERS,
    (Entity.DRIVER, Operation.READ): MANAGERS_OR_SELF,
    (Entity.DRIVER, Operation.CREATE): MANAGERS,
    (Entity.DRIVER, Operation.UPDATE): MANAGERS,
    (Entity.DRIVER, Operation.DELETE): MANAGERS,
    # Trips
    (Entity.TRIP, Operation.LIST): MANAGERS,
    (Entity.TRIP, Operation.READ): MANAGERS_OR_SELF,
    (Entity.TRIP, Operation.SUMMARY): MANAGERS_OR_SELF,
    (Entity.TRIP, Operation.CREATE): MANAGERS,
    (Entity.TRIP, Operation.UPDATE): MANAGERS,
    (Entity.TRIP, Operation.DELETE): MANAGERS,
    # Loads; any member of the company, company scope is checked separately
    (Entity.LOAD, Operation.READ): ANY_ROLE,
    (Entity.LOAD, Operation.CREATE): ANY_ROLE,
    (Entity.LOAD, Operation.UPDATE): ANY_ROLE,
    (Entity.LOAD, Operation.DELETE): ANY_ROLE,
    (Entity.LOAD, Operation.ASSIGN): ANY_ROLE,
    (Entity.LOAD, Operation.UPDATE_STATUS): ANY_ROLE,
    # Expenses
    (Entity.EXPENSE, Operation.LIST): MANAGERS,
    (Entity.EXPENSE, Operation.SUMMARY): MANAGERS,
    (Entity.EXPENSE, Operation.READ): MANAGERS_OR_SELF,
    (Entity.EXPENSE, Operation.CREATE): MANAGERS_OR_SELF,
    (Entity.EXPENSE, Operation.UPDATE): MANAGERS_OR_SELF,
    (Entity.EXPENSE, Operation.DELETE): MANAGERS_OR_SELF,
    # Receipts
    (Entity.RECEIPT, Operation.LIST): MANAGERS,
    (Entity.RECEIPT, Operation.READ): MANAGERS_OR_SELF,
    (Entity.RECEIPT, Operation.CREATE): MANAGERS_OR_SELF,
    (Entity.RECEIPT, Operation.UPDATE): MANAGERS_OR_SELF,
    (Entity.RECEIPT, Operation.DELETE): MANAGERS_OR_SELF,
    # Payments
    (Entity.PAYMENT, Operation.LIST): MANAGERS,
    (Entity.PAYMENT, Operation.READ): MANAGERS_OR_SELF,
    (Entity.PAYMENT, Operation.CREATE): MANAGERS,
    (Entity.PAYMENT, Operation.UPDATE): MANAGERS,
    (Entity.PAYMENT, Operation.DELETE): MANAGERS,
    (Entity.PAYMENT, Operation.GENERATE): MANAGERS,
    # Pay statements
    (Entity.PAY_STATEMENT, Operation.LIST): MANAGERS,
    (Entity.PAY_STATEMENT, Operation.READ): MANAGERS_OR_SELF,
    (Entity.PAY_STATEMENT, Operation.GENERATE): MANAGERS,
    (Entity.PAY_STATEMENT, Operation.UPDATE_STATUS): MANAGERS,
    (Entity.PAY_STATEMENT, Operation.DELETE): MANAGERS,
    # Cash advances
    (Entity.CASH_ADVANCE, Operation.READ): MANAGERS_OR_SELF,
    (Entity.CASH_ADVANCE, Operation.CREATE): MANAGERS,
    (Entity.CASH_ADVANCE, Operation.DELETE): MANAGERS,
    # Deductions
    (Entity.DEDUCTION, Operation.READ): MANAGERS_OR_SELF,
    (Entity.DEDUCTION, Operation.CREATE): MANAGERS,
    (Entity.DEDUCTION, Operation.DELETE): MANAGERS,
}


def allowed_roles(entity: Entity, operation: Operation) -> frozenset[Role]:
    return frozenset(PERMISSIONS.get((entity, operation), {}))


def authorize(
    caller: CallerIdentity,
    entity: Entity,
    operation: Operation,
    driver_id: int | None = None,
) -> int | None:
    """Admit or reject ``caller`` for an operation.

    Args:
        caller: Verified caller, with its own driver record resolved.
        entity: Entity type being touched.
        operation: What is being done to it.
        driver_id: Driver the request targets, if it names or owns one.

    Returns:
        The driver id the caller is confined to, or None for unrestricted
        access.

    Raises:
        Forbidden: Role not allowed, no driver record for a self-service
            role, or ``driver_id`` is somebody else's.
    """
    rule = PERMISSIONS.get((entity, operation))
    access = rule.get(caller.role) if rule else None

    if access is None:
        logger.info(
            "Denied %s %s to user %s with role %s",
            operation.value, entity.value, caller.user_id, caller.role.value,
        )
        raise Forbidden(INSUFFICIENT_PERMISSIONS)

    if access is Access.FULL:
        return None

    if caller.driver is None:
        logger.info("Denied %s %s: user %s has no driver record",
                    operation.value, entity.value, caller.user_id)
        raise Forbidden(NO_DRIVER_RECORD)

    own_id = caller.driver.id
    if driver_id is not None and int(driver_id) != own_id:
        logger.info(
            "Denied %s %s: driver %s requested data of driver %s",
            operation.value, entity.value, own_id, driver_id,
        )
        raise Forbidden(OWN_DATA_ONLY)

    return own_id


def check_company_scope(
    caller: CallerIdentity,
    company_id: int | None,
    resource: str = "company",
) -> None:
    """Compare the caller's company claim against a resource's company.

    A caller without a company claim is not restricted to any company.

    Raises:
        Forbidden: The claim names a different company.
    """
    if not caller.has_company_claim:
        logger.debug(
            "User %s has no companyId claim; skipping company scope for %s data",
            caller.user_id, resource,
        )
        return
    if company_id is None or caller.company_id != int(company_id):
        logger.info(
            "Denied %s data of company %s to user %s of company %s",
            resource, company_id, caller.user_id, caller.company_id,
        )
        raise Forbidden(f"Unauthorized access to {resource} data")


def is_in_company(caller: CallerIdentity, company_id: int | None) -> bool:
    """True when the caller belongs to ``company_id`` or has no company claim."""
    return not caller.has_company_claim or caller.company_id == company_id
