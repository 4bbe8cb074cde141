"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from neopay.api.routes import (
    cash_advances_router,
    companies_router,
    deductions_router,
    drivers_router,
    expenses_router,
    health_router,
    loads_router,
    pay_statements_router,
    payments_router,
    receipts_router,
    trips_router,
)
from neopay.auth import TokenVerifier
from neopay.config import Settings, get_settings
from neopay.database import Database
from neopay.errors import NeoPayError
from neopay.integrations.extraction import ReceiptExtractor, build_extractor
from neopay.integrations.storage import ObjectStorage, build_storage
from neopay.logging_config import configure_logging
from neopay.services.receipt_processor import ReceiptProcessor

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    logger.info("NeoPay API starting (%s)", app.state.settings.environment)
    yield
    # Shutdown
    await app.state.receipt_processor.shutdown()
    await app.state.storage.close()
    close_extractor = getattr(app.state.extractor, "close", None)
    if close_extractor is not None:
        await close_extractor()
    await app.state.database.dispose()


def _validation_message(exc: RequestValidationError) -> str:
    missing: list[str] = []
    invalid: list[str] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        if error.get("type") == "missing":
            missing.append(field)
        else:
            invalid.append(f"{field}: {error.get('msg')}")
    if missing:
        return "Missing required fields: " + ", ".join(missing)
    return "Invalid request: " + "; ".join(invalid)


def create_app(
    settings: Settings | None = None,
    *,
    database: Database | None = None,
    token_verifier: TokenVerifier | None = None,
    storage: ObjectStorage | None = None,
    extractor: ReceiptExtractor | None = None,
    receipt_processor: ReceiptProcessor | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Every collaborator can be passed in; anything omitted is built from
    ``settings``.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.environment)

    database = database or Database.from_url(settings.database_url)
    extractor = extractor or build_extractor(settings)

    app = FastAPI(
        title="NeoPay API",
        description="Fleet management and driver payroll",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.token_verifier = token_verifier or TokenVerifier(
        settings.jwt_secret, settings.jwt_algorithm, settings.jwt_audience
    )
    app.state.storage = storage or build_storage(settings)
    app.state.extractor = extractor
    app.state.receipt_processor = receipt_processor or ReceiptProcessor(
        database, extractor, delay=settings.receipt_processing_delay
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(NeoPayError)
    async def neopay_error_handler(request: Request, exc: NeoPayError) -> JSONResponse:
        content: dict[str, str] = {"message": exc.message}
        if exc.status_code >= 500 and not settings.is_production:
            content["error"] = exc.detail or exc.message
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"message": "Something went wrong!"}
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=content,
        )

    # Include routers
    app.include_router(health_router)
    for router in (
        companies_router,
        drivers_router,
        trips_router,
        loads_router,
        expenses_router,
        receipts_router,
        payments_router,
        pay_statements_router,
        cash_advances_router,
        deductions_router,
    ):
        app.include_router(router, prefix="/api")

    return app
