"""Expense and receipt endpoint tests, including background extraction."""

import base64
from pathlib import Path

import pytest
from httpx import AsyncClient

from neopay.integrations.extraction import ExtractionError
from neopay.services.receipt_processor import ReceiptProcessor

from tests.conftest import DRIVER_A_ID, DRIVER_B_ID, ScriptedExtractor

pytestmark = pytest.mark.asyncio

IMAGE = b"\xff\xd8\xff\xe0fake-jpeg-bytes"


def expense_payload(**overrides) -> dict:
    payload = {
        "driverId": DRIVER_A_ID,
        "category": "Fuel",
        "amount": 20,
        "date": "2025-03-05",
        "description": "Diesel top-up",
    }
    payload.update(overrides)
    return payload


async def upload(client: AsyncClient, headers: dict, driver_id: int = DRIVER_A_ID) -> dict:
    response = await client.post(
        "/api/receipts/upload",
        json={
            "driverId": driver_id,
            "fileName": "pilot.jpg",
            "fileData": "data:image/jpeg;base64," + base64.b64encode(IMAGE).decode(),
        },
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestExpenses:
    async def test_driver_records_own_expense(self, client: AsyncClient, driver_a):
        response = await client.post("/api/expenses", json=expense_payload(), headers=driver_a)

        assert response.status_code == 201
        data = response.json()
        assert data["amount"] == 20.0
        assert data["driverName"] == "Alice Alvarez"

    async def test_driver_cannot_record_for_other_driver(self, client: AsyncClient, driver_a):
        response = await client.post(
            "/api/expenses", json=expense_payload(driverId=DRIVER_B_ID), headers=driver_a
        )
        assert response.status_code == 403

    async def test_amount_must_be_positive(self, client: AsyncClient, manager):
        response = await client.post("/api/expenses", json=expense_payload(amount=0), headers=manager)
        assert response.status_code == 400

    async def test_update_and_delete_own(self, client: AsyncClient, driver_a):
        expense = (
            await client.post("/api/expenses", json=expense_payload(), headers=driver_a)
        ).json()

        updated = await client.put(
            f"/api/expenses/{expense['id']}", json={"amount": 25.5}, headers=driver_a
        )
        assert updated.json()["amount"] == 25.5

        deleted = await client.delete(f"/api/expenses/{expense['id']}", headers=driver_a)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Expense deleted successfully"

    async def test_other_driver_cannot_touch(self, client: AsyncClient, driver_a, driver_b):
        expense = (
            await client.post("/api/expenses", json=expense_payload(), headers=driver_a)
        ).json()

        assert (await client.get(f"/api/expenses/{expense['id']}", headers=driver_b)).status_code == 403
        response = await client.delete(f"/api/expenses/{expense['id']}", headers=driver_b)
        assert response.status_code == 403

    async def test_summaries(self, client: AsyncClient, manager):
        for payload in (
            expense_payload(amount=20),
            expense_payload(amount=30.25),
            expense_payload(driverId=DRIVER_B_ID, category="Tolls", amount=12),
        ):
            assert (await client.post("/api/expenses", json=payload, headers=manager)).status_code == 201

        by_category = (await client.get("/api/expenses/summary/by-category", headers=manager)).json()
        assert by_category == [
            {"category": "Fuel", "total": 50.25, "count": 2},
            {"category": "Tolls", "total": 12.0, "count": 1},
        ]

        by_driver = (await client.get("/api/expenses/summary/by-driver", headers=manager)).json()
        assert by_driver == [
            {"driverId": DRIVER_A_ID, "driverName": "Alice Alvarez", "total": 50.25, "count": 2},
            {"driverId": DRIVER_B_ID, "driverName": "Bob Becker", "total": 12.0, "count": 1},
        ]

        tolls = (await client.get("/api/expenses/category/Tolls", headers=manager)).json()
        assert len(tolls) == 1

    async def test_summaries_need_manager(self, client: AsyncClient, driver_a):
        response = await client.get("/api/expenses/summary/by-category", headers=driver_a)
        assert response.status_code == 403


class TestReceipts:
    async def test_upload_then_extraction_completes(
        self,
        client: AsyncClient,
        driver_a,
        extractor: ScriptedExtractor,
        receipt_processor: ReceiptProcessor,
    ):
        receipt = await upload(client, driver_a)

        assert receipt["status"] == "Processing"
        assert receipt["vendor"] is None

        await receipt_processor.drain()

        response = await client.get(f"/api/receipts/{receipt['id']}", headers=driver_a)
        data = response.json()
        assert data["status"] == "Completed"
        assert data["vendor"] == "Pilot Travel Center"
        assert data["amount"] == 84.2
        assert data["category"] == "Fuel"
        assert data["date"] == "2025-03-14"
        assert [item["description"] for item in data["items"]] == ["Diesel", "Coffee"]
        assert extractor.calls == [(IMAGE, "image/jpeg")]

    async def test_extraction_failure_marks_failed(
        self,
        client: AsyncClient,
        driver_a,
        extractor: ScriptedExtractor,
        receipt_processor: ReceiptProcessor,
    ):
        extractor.result = ExtractionError("unreadable image")

        receipt = await upload(client, driver_a)
        await receipt_processor.drain()

        response = await client.get(f"/api/receipts/{receipt['id']}", headers=driver_a)
        assert response.json()["status"] == "Failed"

    async def test_image_is_stored(self, client: AsyncClient, driver_a, tmp_path: Path):
        await upload(client, driver_a)

        stored = list((tmp_path / "uploads" / "receipts" / str(DRIVER_A_ID)).iterdir())
        assert len(stored) == 1
        assert stored[0].name.endswith("_pilot.jpg")
        assert stored[0].read_bytes() == IMAGE

    async def test_upload_for_other_driver(self, client: AsyncClient, driver_a):
        response = await client.post(
            "/api/receipts/upload",
            json={"driverId": DRIVER_B_ID, "fileName": "x.jpg", "fileData": "eA=="},
            headers=driver_a,
        )
        assert response.status_code == 403

    async def test_upload_invalid_base64(self, client: AsyncClient, driver_a):
        response = await client.post(
            "/api/receipts/upload",
            json={"driverId": DRIVER_A_ID, "fileName": "x.jpg", "fileData": "%%%"},
            headers=driver_a,
        )
        assert response.status_code == 400

    async def test_expense_from_receipt(
        self, client: AsyncClient, driver_a, receipt_processor: ReceiptProcessor
    ):
        receipt = await upload(client, driver_a)
        await receipt_processor.drain()

        response = await client.post(
            f"/api/expenses/from-receipt/{receipt['id']}", headers=driver_a
        )

        assert response.status_code == 201
        data = response.json()
        assert data["category"] == "Fuel"
        assert data["amount"] == 84.2
        assert data["description"] == "Pilot Travel Center"
        assert data["receiptId"] == receipt["id"]

    async def test_delete_removes_image(
        self, client: AsyncClient, driver_a, receipt_processor: ReceiptProcessor, tmp_path: Path
    ):
        receipt = await upload(client, driver_a)
        await receipt_processor.drain()

        response = await client.delete(f"/api/receipts/{receipt['id']}", headers=driver_a)

        assert response.status_code == 200
        assert response.json()["message"] == "Receipt deleted successfully"
        assert list((tmp_path / "uploads" / "receipts" / str(DRIVER_A_ID)).iterdir()) == []

    async def test_manual_correction(
        self, client: AsyncClient, driver_a, receipt_processor: ReceiptProcessor
    ):
        receipt = await upload(client, driver_a)
        await receipt_processor.drain()

        response = await client.put(
            f"/api/receipts/{receipt['id']}",
            json={"vendor": "Pilot #412", "amount": 90},
            headers=driver_a,
        )

        assert response.json()["vendor"] == "Pilot #412"
        assert response.json()["amount"] == 90.0
        assert response.json()["status"] == "Completed"
