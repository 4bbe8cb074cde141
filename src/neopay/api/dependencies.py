"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from neopay.auth import CallerIdentity, TokenVerifier
from neopay.config import Settings
from neopay.database import Database
from neopay.errors import Unauthorized, storage_errors
from neopay.integrations.storage import ObjectStorage
from neopay.services.driver_service import DriverService
from neopay.services.receipt_processor import ReceiptProcessor

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency."""
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_receipt_processor(request: Request) -> ReceiptProcessor:
    return request.app.state.receipt_processor


DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_current_caller(
    request: Request,
    db: DbSession,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> CallerIdentity:
    """Verify the bearer token and resolve the caller's own driver record.

    Raises Unauthorized when the header is missing or the token is invalid.
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Unauthorized - No token provided")

    verifier: TokenVerifier = request.app.state.token_verifier
    caller = verifier.verify(credentials.credentials)

    with storage_errors("Failed to load driver record"):
        caller.driver = await DriverService(db).get_driver_for_user(caller.user_id)
    return caller


# Type aliases for cleaner dependency injection
CurrentCaller = Annotated[CallerIdentity, Depends(get_current_caller)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Storage = Annotated[ObjectStorage, Depends(get_storage)]
Processor = Annotated[ReceiptProcessor, Depends(get_receipt_processor)]
