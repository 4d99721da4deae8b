"""API tests for health check endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.unit
class TestHealthEndpoints:
    """Test health check API endpoints."""

    async def test_health_returns_200(self, client: AsyncClient):
        """GET /health returns 200 with healthy status."""
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "camp-certificate-preview"
