"""Receipt data extraction.

Extraction is an external collaborator: it takes the receipt image and
returns vendor, date, amount, category and line items.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol

import httpx

from neopay.config import Settings

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a receipt cannot be read."""


@dataclass(frozen=True)
class ExtractedItem:
    description: str
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class ExtractedReceipt:
    vendor: str | None
    date: date | None
    amount: Decimal | None
    category: str | None
    items: list[ExtractedItem] = field(default_factory=list)


class ReceiptExtractor(Protocol):
    async def extract(self, content: bytes, content_type: str) -> ExtractedReceipt: ...


def _decimal(value: Any, name: str) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ExtractionError(f"Extractor returned a non-numeric {name}: {value!r}") from e


def parse_extraction(payload: dict[str, Any]) -> ExtractedReceipt:
    """Map an extractor JSON payload onto ExtractedReceipt."""
    raw_date = payload.get("date")
    try:
        parsed_date = date.fromisoformat(raw_date) if raw_date else None
    except ValueError as e:
        raise ExtractionError(f"Extractor returned an invalid date: {raw_date!r}") from e

    items = [
        ExtractedItem(
            description=str(item.get("description") or ""),
            quantity=int(item.get("quantity") or 1),
            price=_decimal(item.get("price"), "price") or Decimal("0.00"),
        )
        for item in payload.get("items") or []
    ]
    return ExtractedReceipt(
        vendor=payload.get("vendor"),
        date=parsed_date,
        amount=_decimal(payload.get("amount"), "amount"),
        category=payload.get("category"),
        items=items,
    )


class HttpReceiptExtractor:
    """Posts the image to a document extraction service and reads back JSON."""

    def __init__(self, url: str, api_key: str | None = None, timeout: float = 60.0):
        self.url = url
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def extract(self, content: bytes, content_type: str) -> ExtractedReceipt:
        try:
            response = await self._client.post(
                self.url,
                files={"file": ("receipt", content, content_type)},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise ExtractionError(f"Extraction request failed: {e}") from e
        except ValueError as e:
            raise ExtractionError("Extraction service returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise ExtractionError("Extraction service returned an unexpected payload")
        return parse_extraction(payload)

    async def close(self) -> None:
        await self._client.aclose()


class UnconfiguredExtractor:
    """Used when no extraction service is configured. Every receipt fails."""

    async def extract(self, content: bytes, content_type: str) -> ExtractedReceipt:
        raise ExtractionError("No receipt extraction service is configured")


def build_extractor(settings: Settings) -> ReceiptExtractor:
    if settings.receipt_extractor_url:
        return HttpReceiptExtractor(settings.receipt_extractor_url)
    logger.warning("RECEIPT_EXTRACTOR_URL is not set; uploaded receipts will be marked Failed")
    return UnconfiguredExtractor()
