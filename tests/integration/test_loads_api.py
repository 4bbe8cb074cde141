"""Load endpoint tests: company scope, assignment and status updates."""

import pytest
from httpx import AsyncClient

from tests.conftest import (
    ACME_COMPANY_ID,
    DRIVER_A_ID,
    DRIVER_A_USER,
    DRIVER_B_USER,
    DRIVER_C_ID,
    DRIVER_C_USER,
    OTHER_COMPANY_ID,
)

pytestmark = pytest.mark.asyncio


@pytest.fixture
def dispatcher(auth_headers) -> dict[str, str]:
    return auth_headers("user-dispatcher", "dispatcher")


async def create_load(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {
        "loadNumber": "LD-1001",
        "customer": "Gulf Produce",
        "origin": "Dallas, TX",
        "destination": "Houston, TX",
        "distance": 240,
        "rate": 900,
        **overrides,
    }
    response = await client.post("/api/loads", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestLoadCRUD:
    async def test_create_defaults_company_from_claim(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        assert load["companyId"] == ACME_COMPANY_ID
        assert load["status"] == "assigned"
        assert load["createdBy"] == "user-dispatcher"
        assert load["nextStatuses"] == ["in_progress", "cancelled"]

    async def test_create_for_other_company_rejected(self, client: AsyncClient, dispatcher):
        response = await client.post(
            "/api/loads", json={"companyId": OTHER_COMPANY_ID}, headers=dispatcher
        )
        assert response.status_code == 403
        assert response.json() == {"message": "Unauthorized access to company data"}

    async def test_create_without_any_company(self, client: AsyncClient, auth_headers):
        headers = auth_headers("user-platform-admin", "admin", company_id=None)
        response = await client.post("/api/loads", json={"loadNumber": "X"}, headers=headers)
        assert response.status_code == 400

    async def test_driver_creates_load_in_own_company(self, client: AsyncClient, driver_a):
        response = await client.post("/api/loads", json={"loadNumber": "LD-9"}, headers=driver_a)

        assert response.status_code == 201
        assert response.json()["companyId"] == ACME_COMPANY_ID
        assert response.json()["createdBy"] == DRIVER_A_USER

    async def test_driver_cannot_create_for_other_company(self, client: AsyncClient, driver_a):
        response = await client.post(
            "/api/loads", json={"companyId": OTHER_COMPANY_ID}, headers=driver_a
        )
        assert response.status_code == 403

    async def test_list_is_company_scoped(self, client: AsyncClient, dispatcher, auth_headers):
        await create_load(client, dispatcher)
        other = auth_headers("user-other-dispatcher", "dispatcher", company_id=OTHER_COMPANY_ID)
        await create_load(client, other, loadNumber="LD-2001")

        response = await client.get("/api/loads", headers=dispatcher)

        assert [load["loadNumber"] for load in response.json()] == ["LD-1001"]

    async def test_company_listing_of_other_company(self, client: AsyncClient, manager):
        response = await client.get(f"/api/loads/company/{OTHER_COMPANY_ID}", headers=manager)
        assert response.status_code == 403

    async def test_any_role_reads_own_company_load(
        self, client: AsyncClient, dispatcher, auth_headers
    ):
        load = await create_load(client, dispatcher)
        accountant = auth_headers("user-accountant", "accountant")

        response = await client.get(f"/api/loads/{load['id']}", headers=accountant)

        assert response.status_code == 200

    async def test_other_company_cannot_read(self, client: AsyncClient, dispatcher, auth_headers):
        load = await create_load(client, dispatcher)
        outsider = auth_headers(DRIVER_C_USER, "driver", company_id=OTHER_COMPANY_ID)

        response = await client.get(f"/api/loads/{load['id']}", headers=outsider)

        assert response.status_code == 403
        assert response.json() == {"message": "Unauthorized access to load data"}

    async def test_delete(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.delete(f"/api/loads/{load['id']}", headers=dispatcher)

        assert response.status_code == 200
        assert response.json()["message"] == "Load deleted successfully"


class TestLoadAssignment:
    async def test_assign_same_company_driver(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.post(
            f"/api/loads/{load['id']}/assign", json={"driverId": DRIVER_A_ID}, headers=dispatcher
        )

        assert response.status_code == 200
        assert response.json()["driverId"] == DRIVER_A_ID

    async def test_assign_other_company_driver(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.post(
            f"/api/loads/{load['id']}/assign", json={"driverId": DRIVER_C_ID}, headers=dispatcher
        )

        assert response.status_code == 400
        assert response.json() == {
            "message": "Driver does not belong to the same company as the load"
        }

    async def test_unassign(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher, driverId=DRIVER_A_ID)

        response = await client.post(
            f"/api/loads/{load['id']}/assign", json={"driverId": None}, headers=dispatcher
        )

        assert response.json()["driverId"] is None

    async def test_driver_loads_listing(self, client: AsyncClient, dispatcher, driver_a):
        await create_load(client, dispatcher, driverId=DRIVER_A_ID)

        response = await client.get(f"/api/loads/driver/{DRIVER_A_ID}", headers=driver_a)

        assert response.status_code == 200
        assert len(response.json()) == 1

    async def test_driver_loads_of_other_company(self, client: AsyncClient, manager):
        response = await client.get(f"/api/loads/driver/{DRIVER_C_ID}", headers=manager)
        assert response.status_code == 403
        assert response.json() == {"message": "Unauthorized access to driver data"}


class TestLoadStatus:
    async def test_in_progress_without_driver_is_accepted(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.post(
            f"/api/loads/{load['id']}/status", json={"status": "in_progress"}, headers=dispatcher
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "in_progress"
        assert data["driverId"] is None
        assert data["nextStatuses"] == ["completed", "cancelled"]

    async def test_off_graph_move_is_accepted(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.post(
            f"/api/loads/{load['id']}/status", json={"status": "completed"}, headers=dispatcher
        )

        assert response.status_code == 200
        assert response.json()["nextStatuses"] == []

    async def test_invalid_status(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)

        response = await client.post(
            f"/api/loads/{load['id']}/status", json={"status": "delivered"}, headers=dispatcher
        )

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid status")

    async def test_missing_status(self, client: AsyncClient, dispatcher):
        load = await create_load(client, dispatcher)
        response = await client.post(
            f"/api/loads/{load['id']}/status", json={}, headers=dispatcher
        )
        assert response.status_code == 400

    async def test_assigned_driver_outside_claimed_company(
        self, client: AsyncClient, dispatcher, auth_headers
    ):
        load = await create_load(client, dispatcher, driverId=DRIVER_A_ID)
        # Claim names another company, but the caller is the assigned driver
        headers = auth_headers(DRIVER_A_USER, "driver", company_id=OTHER_COMPANY_ID)

        response = await client.post(
            f"/api/loads/{load['id']}/status", json={"status": "in_progress"}, headers=headers
        )

        assert response.status_code == 200

    async def test_unassigned_outsider_rejected(
        self, client: AsyncClient, dispatcher, auth_headers
    ):
        load = await create_load(client, dispatcher, driverId=DRIVER_A_ID)
        headers = auth_headers(DRIVER_B_USER, "owner", company_id=OTHER_COMPANY_ID)

        response = await client.post(
            f"/api/loads/{load['id']}/status", json={"status": "in_progress"}, headers=headers
        )

        assert response.status_code == 403
        assert response.json() == {"message": "Unauthorized access to load data"}
