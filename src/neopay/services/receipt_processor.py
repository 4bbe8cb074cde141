"""Background receipt extraction.

An upload leaves the receipt in Processing and submits a job here. After
``delay`` seconds the job calls the extractor and moves the receipt to
Completed with the extracted fields, or to Failed on any error. There is
no retry.

Jobs are tracked asyncio tasks owned by the processor, so they can be
awaited (``drain``) or cancelled (``shutdown``).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from neopay.database import Database
from neopay.integrations.extraction import ReceiptExtractor
from neopay.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

# Called with (receipt_id, final_status) once a job finishes
CompletionCallback = Callable[[int, str], Awaitable[None]]


class ReceiptProcessor:
    """Runs receipt extraction jobs in the event loop."""

    def __init__(
        self,
        database: Database,
        extractor: ReceiptExtractor,
        delay: float = 3.0,
        on_complete: CompletionCallback | None = None,
    ):
        self.database = database
        self.extractor = extractor
        self.delay = delay
        self.on_complete = on_complete
        self._tasks: set[asyncio.Task[str | None]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, receipt_id: int, content: bytes, content_type: str) -> asyncio.Task[str | None]:
        """Schedule extraction for a committed receipt row."""
        task = asyncio.create_task(
            self._run(receipt_id, content, content_type),
            name=f"receipt-extraction-{receipt_id}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.debug("Queued extraction for receipt %s", receipt_id)
        return task

    async def _run(self, receipt_id: int, content: bytes, content_type: str) -> str | None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

        status: str | None
        try:
            extracted = await self.extractor.extract(content, content_type)
            async with self.database.session() as session:
                receipt = await ReceiptService(session).complete(receipt_id, extracted)
                status = receipt.status
            logger.info("Receipt %s processed: %s", receipt_id, status)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Error processing receipt %s", receipt_id)
            status = await self._mark_failed(receipt_id)

        if self.on_complete is not None and status is not None:
            try:
                await self.on_complete(receipt_id, status)
            except Exception:
                logger.exception("Completion callback failed for receipt %s", receipt_id)
        return status

    async def _mark_failed(self, receipt_id: int) -> str | None:
        try:
            async with self.database.session() as session:
                receipt = await ReceiptService(session).fail(receipt_id)
                return receipt.status if receipt is not None else None
        except Exception:
            logger.exception("Could not mark receipt %s as Failed", receipt_id)
            return None

    async def drain(self) -> None:
        """Wait for every queued job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding jobs. Their receipts stay in Processing."""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        self._tasks.clear()
