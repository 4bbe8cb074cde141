"""Receipt service: upload, edit, delete and extraction results."""

from __future__ import annotations

import logging
import time
from datetime import date
from typing import Any

from sqlalchemy import select

from neopay.errors import NotFound, ValidationError
from neopay.integrations.extraction import ExtractedReceipt
from neopay.integrations.storage import (
    ObjectStorage,
    decode_upload_payload,
    receipt_object_path,
)
from neopay.models import Driver, Receipt, ReceiptItem
from neopay.services.base import EntityService
from neopay.services.state_machine import ReceiptStateMachine, ReceiptStatus

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"vendor", "date", "amount", "category"})


class ReceiptService(EntityService):
    """Receipt CRUD. Extraction itself runs in ``ReceiptProcessor``."""

    async def list_receipts(self) -> list[Receipt]:
        result = await self.session.execute(
            select(Receipt).order_by(Receipt.upload_date.desc(), Receipt.id.desc())
        )
        return list(result.scalars().all())

    async def list_for_driver(self, driver_id: int) -> list[Receipt]:
        result = await self.session.execute(
            select(Receipt)
            .where(Receipt.driver_id == driver_id)
            .order_by(Receipt.upload_date.desc(), Receipt.id.desc())
        )
        return list(result.scalars().all())

    async def get_receipt(self, receipt_id: int) -> Receipt:
        return await self._get_or_404(Receipt, receipt_id, "Receipt")

    async def upload_receipt(
        self,
        storage: ObjectStorage,
        *,
        driver_id: int,
        file_name: str,
        file_data: str,
        user_id: str,
    ) -> tuple[Receipt, bytes, str]:
        """Store the image and create the receipt row in Processing.

        Returns:
            The receipt plus the decoded content and its content type, for
            handing to the extraction job.
        """
        if not driver_id or not file_name or not file_data:
            raise ValidationError("Missing required fields")

        driver = await self.session.get(Driver, driver_id)
        if driver is None:
            raise NotFound("Driver not found")

        content, content_type = decode_upload_payload(file_data)
        path = receipt_object_path(driver.id, file_name, int(time.time() * 1000))
        stored = await storage.upload(path, content, content_type)

        receipt = Receipt(
            driver_id=driver.id,
            file_name=file_name,
            file_path=stored.public_url,
            storage_path=stored.path,
            upload_date=date.today(),
            status=ReceiptStatus.PROCESSING.value,
            user_id=user_id,
        )
        receipt.driver = driver
        receipt = await self._save(receipt)
        logger.info("Receipt %s uploaded for driver %s as %s", receipt.id, driver.id, path)
        return receipt, content, content_type

    async def update_receipt(self, receipt: Receipt, fields: dict[str, Any]) -> Receipt:
        self._apply(receipt, fields, UPDATABLE_FIELDS)
        return await self._save(receipt)

    async def delete_receipt(self, receipt: Receipt, storage: ObjectStorage) -> Receipt:
        """Remove the stored image, the extracted items and the row."""
        if receipt.storage_path:
            await storage.delete(receipt.storage_path)
        await self._delete(receipt)
        return receipt

    async def complete(self, receipt_id: int, extracted: ExtractedReceipt) -> Receipt:
        """Write extraction results and move the receipt to Completed."""
        receipt = await self.get_receipt(receipt_id)
        ReceiptStateMachine.validate_transition(receipt.status, ReceiptStatus.COMPLETED)

        receipt.vendor = extracted.vendor
        receipt.date = extracted.date
        receipt.amount = extracted.amount
        receipt.category = extracted.category
        receipt.items = [
            ReceiptItem(description=item.description, quantity=item.quantity, price=item.price)
            for item in extracted.items
        ]
        receipt.status = ReceiptStatus.COMPLETED.value
        return await self._save(receipt)

    async def fail(self, receipt_id: int) -> Receipt | None:
        """Move a receipt to Failed, unless it already reached a terminal status."""
        receipt = await self.session.get(Receipt, receipt_id)
        if receipt is None:
            return None
        if not ReceiptStateMachine.can_transition(receipt.status, ReceiptStatus.FAILED):
            return receipt
        receipt.status = ReceiptStatus.FAILED.value
        return await self._save(receipt)
