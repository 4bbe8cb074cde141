"""Caller roles."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles a caller can carry in the identity token metadata."""

    ADMIN = "admin"
    MANAGER = "manager"
    ACCOUNTANT = "accountant"
    DISPATCHER = "dispatcher"
    DRIVER = "driver"
    OWNER = "owner"  # Owner-operator
    USER = "user"

    @classmethod
    def parse(cls, value: str | None) -> Role:
        """Map a raw metadata value to a Role; absent or unknown means USER."""
        if not value:
            return cls.USER
        try:
            return cls(value)
        except ValueError:
            return cls.USER


# Roles a company membership can grant; driver and owner come from driver records
COMPANY_ROLES: tuple[Role, ...] = (
    Role.ADMIN,
    Role.MANAGER,
    Role.ACCOUNTANT,
    Role.DISPATCHER,
    Role.USER,
)
