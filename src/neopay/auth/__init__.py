"""Authentication and authorization."""

from neopay.auth.identity import CallerIdentity, TokenVerifier, identity_from_claims
from neopay.auth.permissions import (
    Access,
    Entity,
    Operation,
    PERMISSIONS,
    authorize,
    check_company_scope,
    is_in_company,
)
from neopay.auth.roles import COMPANY_ROLES, Role

__all__ = [
    "COMPANY_ROLES",
    "Access",
    "CallerIdentity",
    "Entity",
    "Operation",
    "PERMISSIONS",
    "Role",
    "TokenVerifier",
    "authorize",
    "check_company_scope",
    "identity_from_claims",
    "is_in_company",
]
