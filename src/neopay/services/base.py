"""Shared persistence helpers for entity services."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from neopay.errors import NotFound, ValidationError
from neopay.models import Base

ModelT = TypeVar("ModelT", bound=Base)


def reject_nulls(model: type[Base], fields: dict[str, Any], allowed: frozenset[str]) -> None:
    """Raise ValidationError when a partial update sets a NOT NULL column to None."""
    columns = model.__table__.columns
    cleared = [
        to_camel(name)
        for name, value in fields.items()
        if value is None
        and name in allowed
        and name in columns
        and not columns[name].nullable
    ]
    if cleared:
        raise ValidationError(f"Invalid request: {', '.join(cleared)} cannot be null")


class EntityService:
    """Base for services that read and write one kind of row.

    Services flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_or_404(self, model: type[ModelT], row_id: int, label: str) -> ModelT:
        row = await self.session.get(model, row_id)
        if row is None:
            raise NotFound(f"{label} not found")
        return row

    async def _save(self, row: ModelT) -> ModelT:
        """Flush pending changes and reload server-generated columns."""
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def _delete(self, row: Base) -> None:
        await self.session.delete(row)
        await self.session.flush()

    @staticmethod
    def _apply(row: Base, fields: dict[str, Any], allowed: frozenset[str]) -> None:
        """Copy the supplied fields that are allowed onto ``row``."""
        reject_nulls(type(row), fields, allowed)
        for name, value in fields.items():
            if name in allowed:
                setattr(row, name, value)
