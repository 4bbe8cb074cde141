"""Identity token verification.

Tokens are issued by the hosted auth platform and signed with its JWT
secret. The caller's role and company live in ``user_metadata``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt

from neopay.auth.roles import Role
from neopay.errors import Unauthorized

if TYPE_CHECKING:
    from neopay.models import Driver

logger = logging.getLogger(__name__)


@dataclass
class CallerIdentity:
    """The authenticated caller for one request."""

    user_id: str
    role: Role
    email: str | None = None
    company_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    # Resolved after verification from drivers.user_id
    driver: Driver | None = None

    @property
    def driver_id(self) -> int | None:
        return self.driver.id if self.driver is not None else None

    @property
    def has_company_claim(self) -> bool:
        return self.company_id is not None


def _parse_company_id(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric companyId claim: %r", value)
        return None


def identity_from_claims(claims: dict[str, Any]) -> CallerIdentity:
    """Build a CallerIdentity from verified token claims."""
    user_id = claims.get("sub")
    if not user_id:
        raise Unauthorized("Unauthorized - Invalid token")

    metadata = claims.get("user_metadata") or {}
    return CallerIdentity(
        user_id=str(user_id),
        role=Role.parse(metadata.get("role")),
        email=claims.get("email"),
        company_id=_parse_company_id(metadata.get("companyId")),
        metadata=metadata,
    )


class TokenVerifier:
    """Verifies HS256 tokens signed with the platform JWT secret."""

    def __init__(self, secret: str, algorithm: str = "HS256", audience: str | None = None):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def decode(self, token: str) -> dict[str, Any]:
        """Decode and validate a token, raising Unauthorized on any failure."""
        if not self.secret:
            logger.error("JWT secret is not configured; rejecting token")
            raise Unauthorized("Unauthorized - Invalid token")
        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.info("JWT decode error: %s", e)
            raise Unauthorized("Unauthorized - Invalid token") from e

    def verify(self, token: str) -> CallerIdentity:
        return identity_from_claims(self.decode(token))
