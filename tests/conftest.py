"""Pytest fixtures for NeoPay tests."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator, Callable
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt

from neopay.api.app import create_app
from neopay.config import Settings
from neopay.database import Database
from neopay.integrations.extraction import ExtractedItem, ExtractedReceipt
from neopay.integrations.storage import LocalFileStorage
from neopay.models import Company, Driver
from neopay.services.receipt_processor import ReceiptProcessor

TEST_JWT_SECRET = "test-jwt-secret"
TEST_AUDIENCE = "authenticated"

ACME_COMPANY_ID = 1
OTHER_COMPANY_ID = 2

# Driver A: company driver, per mile. Driver B: owner-operator, percentage.
DRIVER_A_ID = 1
DRIVER_B_ID = 2
# Belongs to the other company
DRIVER_C_ID = 3

DRIVER_A_USER = "user-driver-a"
DRIVER_B_USER = "user-driver-b"
DRIVER_C_USER = "user-driver-c"
MANAGER_USER = "user-manager"


class ScriptedExtractor:
    """Extractor whose next result (or error) is set by the test."""

    def __init__(self) -> None:
        self.result: ExtractedReceipt | Exception = ExtractedReceipt(
            vendor="Pilot Travel Center",
            date=date(2025, 3, 14),
            amount=Decimal("84.20"),
            category="Fuel",
            items=[
                ExtractedItem(description="Diesel", quantity=1, price=Decimal("80.00")),
                ExtractedItem(description="Coffee", quantity=2, price=Decimal("2.10")),
            ],
        )
        self.calls: list[tuple[bytes, str]] = []

    async def extract(self, content: bytes, content_type: str) -> ExtractedReceipt:
        self.calls.append((content, content_type))
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def make_token(
    sub: str,
    role: str | None = None,
    company_id: int | None = ACME_COMPANY_ID,
    secret: str = TEST_JWT_SECRET,
    expires_in: int = 3600,
) -> str:
    """Mint a token shaped like the hosted auth platform's."""
    metadata: dict[str, Any] = {}
    if role is not None:
        metadata["role"] = role
    if company_id is not None:
        metadata["companyId"] = company_id
    claims = {
        "sub": sub,
        "aud": TEST_AUDIENCE,
        "exp": int(time.time()) + expires_in,
        "email": f"{sub}@example.com",
        "user_metadata": metadata,
    }
    return jwt.encode(claims, secret, algorithm="HS256")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings for an isolated test instance."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'neopay_test.db'}",
        supabase_url="",
        supabase_key="",
        jwt_secret=TEST_JWT_SECRET,
        jwt_algorithm="HS256",
        jwt_audience=TEST_AUDIENCE,
        environment="test",
        cors_origin="http://localhost:3000",
        storage_backend="local",
        storage_bucket="receipts",
        local_storage_dir=str(tmp_path / "uploads"),
        receipt_processing_delay=0.0,
        receipt_extractor_url="",
        default_tax_withholding_percent=Decimal("15"),
        host="127.0.0.1",
        port=5000,
        debug=False,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    """Fresh schema on a per-test SQLite file."""
    db = Database.from_url(settings.database_url)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def seeded_db(database: Database) -> Database:
    """Two companies and three drivers."""
    async with database.session() as session:
        session.add_all(
            [
                Company(id=ACME_COMPANY_ID, name="Acme Freight", owner_id=MANAGER_USER),
                Company(id=OTHER_COMPANY_ID, name="Other Hauling", owner_id="user-other"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                Driver(
                    id=DRIVER_A_ID,
                    company_id=ACME_COMPANY_ID,
                    name="Alice Alvarez",
                    email="alice@example.com",
                    phone="555-0101",
                    license="CDL-A-1001",
                    type="company",
                    employment_type="W2",
                    pay_rate=Decimal("0.55"),
                    pay_rate_type="per_mile",
                    tax_withholding_percent=Decimal("15"),
                    has_benefits=True,
                    user_id=DRIVER_A_USER,
                ),
                Driver(
                    id=DRIVER_B_ID,
                    company_id=ACME_COMPANY_ID,
                    name="Bob Becker",
                    email="bob@example.com",
                    phone="555-0102",
                    license="CDL-A-1002",
                    type="owner",
                    employment_type="1099",
                    pay_rate=Decimal("60"),
                    pay_rate_type="percentage",
                    tax_withholding_percent=Decimal("10"),
                    has_benefits=False,
                    user_id=DRIVER_B_USER,
                ),
                Driver(
                    id=DRIVER_C_ID,
                    company_id=OTHER_COMPANY_ID,
                    name="Carla Chen",
                    email="carla@example.com",
                    phone="555-0201",
                    license="CDL-A-2001",
                    type="company",
                    employment_type="W2",
                    pay_rate_type="per_mile",
                    tax_withholding_percent=Decimal("15"),
                    has_benefits=True,
                    user_id=DRIVER_C_USER,
                ),
            ]
        )
    return database


@pytest.fixture
def extractor() -> ScriptedExtractor:
    return ScriptedExtractor()


@pytest.fixture
def storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "uploads")


@pytest_asyncio.fixture
async def receipt_processor(
    seeded_db: Database, extractor: ScriptedExtractor
) -> AsyncGenerator[ReceiptProcessor, None]:
    processor = ReceiptProcessor(seeded_db, extractor, delay=0)
    yield processor
    await processor.shutdown()


@pytest_asyncio.fixture
async def client(
    settings: Settings,
    seeded_db: Database,
    storage: LocalFileStorage,
    extractor: ScriptedExtractor,
    receipt_processor: ReceiptProcessor,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against an app wired to the test collaborators."""
    app = create_app(
        settings,
        database=seeded_db,
        storage=storage,
        extractor=extractor,
        receipt_processor=receipt_processor,
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers() -> Callable[..., dict[str, str]]:
    """Build an Authorization header: ``auth_headers("user-x", "manager")``."""

    def _headers(sub: str, role: str | None = None, company_id: int | None = ACME_COMPANY_ID):
        return {"Authorization": f"Bearer {make_token(sub, role, company_id)}"}

    return _headers


@pytest.fixture
def manager(auth_headers) -> dict[str, str]:
    return auth_headers(MANAGER_USER, "manager")


@pytest.fixture
def driver_a(auth_headers) -> dict[str, str]:
    return auth_headers(DRIVER_A_USER, "driver")


@pytest.fixture
def driver_b(auth_headers) -> dict[str, str]:
    return auth_headers(DRIVER_B_USER, "owner")
