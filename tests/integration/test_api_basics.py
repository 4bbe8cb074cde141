"""Health, authentication and error envelope tests."""

import pytest
from httpx import AsyncClient

from tests.conftest import DRIVER_A_USER, make_token

pytestmark = pytest.mark.asyncio


class TestHealthEndpoints:
    async def test_welcome(self, client: AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": "Welcome to NeoPay API"}

    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert "timestamp" in data

    async def test_readiness_and_liveness(self, client: AsyncClient):
        assert (await client.get("/ready")).json() == {"status": "ready"}
        assert (await client.get("/live")).json() == {"status": "alive"}


class TestAuthentication:
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/drivers")
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized - No token provided"}

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/drivers", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json() == {"message": "Unauthorized - Invalid token"}

    async def test_token_signed_with_other_secret(self, client: AsyncClient):
        token = make_token(DRIVER_A_USER, "driver", secret="someone-elses-secret")
        response = await client.get(
            "/api/drivers/1", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    async def test_authenticated_but_forbidden(self, client: AsyncClient, driver_a):
        response = await client.get("/api/drivers", headers=driver_a)
        assert response.status_code == 403
        assert response.json() == {"message": "Forbidden - Insufficient permissions"}


class TestErrorEnvelope:
    async def test_unknown_route(self, client: AsyncClient):
        response = await client.get("/api/unknown")
        assert response.status_code == 404
        assert "message" in response.json()

    async def test_not_found_entity(self, client: AsyncClient, manager):
        response = await client.get("/api/drivers/999", headers=manager)
        assert response.status_code == 404
        assert response.json() == {"message": "Driver not found"}

    async def test_missing_body_fields(self, client: AsyncClient, manager):
        response = await client.post("/api/drivers", json={"name": "Dee"}, headers=manager)
        assert response.status_code == 400
        message = response.json()["message"]
        assert message.startswith("Missing required fields")
        assert "email" in message
        assert "license" in message

    async def test_invalid_field_value(self, client: AsyncClient, manager):
        response = await client.post(
            "/api/trips",
            json={
                "driverId": 1,
                "date": "not-a-date",
                "origin": "A",
                "destination": "B",
                "distance": 10,
                "rate": 1,
            },
            headers=manager,
        )
        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid request")
