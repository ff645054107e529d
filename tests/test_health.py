"""
Health, root, OpenAPI and metrics endpoints.
"""
import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest.fixture
async def plain_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.mark.asyncio
async def test_health_endpoint(plain_client):
    response = await plain_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "edas-backoffice"}


@pytest.mark.asyncio
async def test_root_endpoint(plain_client):
    response = await plain_client.get("/")
    assert response.status_code == 200
    assert "version" in response.json()


@pytest.mark.asyncio
async def test_openapi_schema(plain_client):
    response = await plain_client.get("/openapi.json")
    assert response.status_code == 200
    data = response.json()
    assert "/api/v1/edas/notifications" in data["paths"]
    assert "/api/v1/voltage-drop/calculate" in data["paths"]
    assert "BearerAuth" in data["components"]["securitySchemes"]


@pytest.mark.asyncio
async def test_metrics_endpoint(plain_client):
    await plain_client.get("/health")
    response = await plain_client.get("/metrics")
    assert response.status_code == 200
    assert "edas_http_requests_total" in response.text


@pytest.mark.asyncio
async def test_edas_endpoints_require_auth(plain_client):
    response = await plain_client.get("/api/v1/edas/notifications")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_request_id_is_echoed(plain_client):
    response = await plain_client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"

    response = await plain_client.get("/api/v1/edas/notifications", headers={"X-Request-ID": "req-43"})
    assert response.headers["X-Request-ID"] == "req-43"
    assert response.json()["error"]["request_id"] == "req-43"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(plain_client):
    response = await plain_client.get("/api/v1/bilinmeyen")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"
