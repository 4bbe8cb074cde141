"""Error taxonomy shared by services and the HTTP layer."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class NeoPayError(Exception):
    """Base error. Carries the HTTP status used when it reaches a client."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class Unauthorized(NeoPayError):
    """Missing or invalid identity."""

    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(NeoPayError):
    """Authenticated, but role, ownership or company scope does not allow it."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(NeoPayError):
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(NeoPayError):
    status_code = status.HTTP_400_BAD_REQUEST


class InternalError(NeoPayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class InvalidTransitionError(ValidationError):
    """Raised when a status change is not allowed by a state machine."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


@contextmanager
def storage_errors(message: str) -> Iterator[None]:
    """Convert persistence failures into an InternalError with ``message``.

    NeoPayError subclasses raised inside the block pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("%s", message)
        raise InternalError(message, detail=str(e)) from e
