"""Driver endpoint tests."""

import pytest
from httpx import AsyncClient

from tests.conftest import DRIVER_A_ID, DRIVER_B_ID

pytestmark = pytest.mark.asyncio

NEW_DRIVER = {
    "name": "Dana Diaz",
    "email": "dana@example.com",
    "phone": "555-0199",
    "license": "CDL-A-1099",
}


class TestDriverCRUD:
    async def test_list_drivers_as_manager(self, client: AsyncClient, manager):
        response = await client.get("/api/drivers", headers=manager)

        assert response.status_code == 200
        names = [d["name"] for d in response.json()]
        assert "Alice Alvarez" in names
        assert "Bob Becker" in names

    async def test_create_company_driver_defaults(self, client: AsyncClient, manager):
        response = await client.post("/api/drivers", json=NEW_DRIVER, headers=manager)

        assert response.status_code == 201, response.text
        data = response.json()
        assert data["type"] == "company"
        assert data["employmentType"] == "W2"
        assert data["payRateType"] == "per_mile"
        assert data["taxWithholdingPercent"] == 15.0
        assert data["hasBenefits"] is True
        assert data["status"] == "active"
        assert data["companyId"] == 1
        assert data["joinDate"] is not None

    async def test_create_owner_operator_defaults(self, client: AsyncClient, manager):
        response = await client.post(
            "/api/drivers", json={**NEW_DRIVER, "type": "owner"}, headers=manager
        )

        assert response.status_code == 201
        data = response.json()
        assert data["employmentType"] == "1099"
        assert data["payRateType"] == "percentage"
        assert data["hasBenefits"] is False

    async def test_null_name_rejected(self, client: AsyncClient, manager):
        response = await client.put(
            f"/api/drivers/{DRIVER_A_ID}", json={"name": None}, headers=manager
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid request: name cannot be null"}
        driver = await client.get(f"/api/drivers/{DRIVER_A_ID}", headers=manager)
        assert driver.json()["name"] == "Alice Alvarez"

    async def test_null_for_nullable_column_clears_it(self, client: AsyncClient, manager):
        response = await client.put(
            f"/api/drivers/{DRIVER_A_ID}", json={"payRate": None}, headers=manager
        )

        assert response.status_code == 200
        assert response.json()["payRate"] is None

    async def test_explicit_values_kept(self, client: AsyncClient, manager):
        response = await client.post(
            "/api/drivers",
            json={**NEW_DRIVER, "type": "owner", "payRateType": "fixed", "taxWithholdingPercent": 0},
            headers=manager,
        )

        data = response.json()
        assert data["payRateType"] == "fixed"
        assert data["taxWithholdingPercent"] == 0.0

    async def test_type_change_rederives_pay_rate_type(self, client: AsyncClient, manager):
        response = await client.put(
            f"/api/drivers/{DRIVER_A_ID}", json={"type": "owner"}, headers=manager
        )

        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "owner"
        assert data["payRateType"] == "percentage"
        assert data["employmentType"] == "1099"

    async def test_delete_driver(self, client: AsyncClient, manager):
        created = (await client.post("/api/drivers", json=NEW_DRIVER, headers=manager)).json()

        response = await client.delete(f"/api/drivers/{created['id']}", headers=manager)

        assert response.status_code == 200
        assert response.json()["message"] == "Driver deleted successfully"
        assert response.json()["driver"]["id"] == created["id"]
        missing = await client.get(f"/api/drivers/{created['id']}", headers=manager)
        assert missing.status_code == 404


class TestDriverScoping:
    async def test_driver_reads_own_record(self, client: AsyncClient, driver_a):
        response = await client.get(f"/api/drivers/{DRIVER_A_ID}", headers=driver_a)
        assert response.status_code == 200
        assert response.json()["name"] == "Alice Alvarez"

    async def test_driver_cannot_read_other_record(self, client: AsyncClient, driver_a):
        response = await client.get(f"/api/drivers/{DRIVER_B_ID}", headers=driver_a)
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden - You can only access your own data"}

    async def test_driver_role_without_record(self, client: AsyncClient, auth_headers):
        headers = auth_headers("user-with-no-driver", "driver")
        response = await client.get(f"/api/drivers/{DRIVER_A_ID}", headers=headers)
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden - No driver record found for this user"}

    async def test_driver_cannot_create_drivers(self, client: AsyncClient, driver_a):
        response = await client.post("/api/drivers", json=NEW_DRIVER, headers=driver_a)
        assert response.status_code == 403

    async def test_own_trips_listing(self, client: AsyncClient, driver_a):
        response = await client.get(f"/api/drivers/{DRIVER_A_ID}/trips", headers=driver_a)
        assert response.status_code == 200
        assert response.json() == []

    async def test_other_drivers_trips_listing(self, client: AsyncClient, driver_a):
        response = await client.get(f"/api/drivers/{DRIVER_B_ID}/trips", headers=driver_a)
        assert response.status_code == 403
