"""
Back-office API client tests (httpx.MockTransport, plus one round trip against the app).
"""
import httpx
import pytest

from src.core.config import settings
from src.modules.integrations.backend_client import ApiClientError, EdasApiClient

BASE_URL = "http://backend.test/api/v1"


@pytest.fixture
def sleeps(monkeypatch) -> list[float]:
    """Record backoff delays instead of sleeping."""
    delays: list[float] = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr("src.modules.integrations.backend_client.asyncio.sleep", fake_sleep)
    return delays


def _client(handler, **kwargs) -> EdasApiClient:
    return EdasApiClient(
        base_url=BASE_URL,
        token="test-token",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_get_retries_server_errors_with_backoff(sleeps):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503, json={"error": {"message": "busy"}})
        return httpx.Response(200, json={"items": [], "total": 0, "page": 1, "page_size": 20, "pages": 0})

    async with _client(handler, max_retries=2, backoff_base=0.5) as client:
        data = await client.list_notifications(company="BEDAŞ")

    assert data["total"] == 0
    assert len(calls) == 2
    assert sleeps == [0.5]
    assert calls[0].url.path == "/api/v1/edas/notifications"
    assert calls[0].url.params["company"] == "BEDAŞ"
    assert calls[0].headers["Authorization"] == "Bearer test-token"


@pytest.mark.asyncio
async def test_get_gives_up_after_max_retries(sleeps):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(502, json={"error": {"message": "bad gateway"}})

    async with _client(handler, max_retries=2, backoff_base=1.0) as client:
        with pytest.raises(ApiClientError) as exc_info:
            await client.get_notification("abc")

    assert exc_info.value.status_code == 502
    assert exc_info.value.message == "bad gateway"
    assert len(calls) == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_get_retries_transport_errors(sleeps):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json={"id": "abc"})

    async with _client(handler, max_retries=2, backoff_base=1.0) as client:
        data = await client.get_notification("abc")

    assert data == {"id": "abc"}
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_unreachable_backend_raises(sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler, max_retries=1) as client:
        with pytest.raises(ApiClientError) as exc_info:
            await client.get_notification("abc")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_post_is_not_retried(sleeps):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503, json={"error": {"message": "busy"}})

    async with _client(handler, max_retries=3) as client:
        with pytest.raises(ApiClientError):
            await client.update_step_status("abc", "PROJE", "APPROVED")

    assert len(calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_client_error_is_not_retried(sleeps):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404, json={"error": {"code": "NOT_FOUND", "message": "EdasNotification not found"}})

    async with _client(handler) as client:
        with pytest.raises(ApiClientError) as exc_info:
            await client.get_notification("abc")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "EdasNotification not found"
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_upload_sends_multipart(sleeps):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.read()
        return httpx.Response(201, json={"id": "doc-1"})

    async with _client(handler) as client:
        data = await client.upload_document(
            "abc", "PROJE", "tapu.pdf", b"%PDF-1.4", "application/pdf", document_type="Tapu Senedi"
        )

    assert data == {"id": "doc-1"}
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'filename="tapu.pdf"' in seen["body"]


@pytest.mark.asyncio
async def test_round_trip_against_app(app_overrides, auth_headers, bedas_payload):
    token = auth_headers["Authorization"].removeprefix("Bearer ")
    client = EdasApiClient(
        base_url="http://testserver/api/v1",
        token=token,
        transport=httpx.ASGITransport(app=app_overrides),
    )

    async with client:
        created = await client.create_notification(bedas_payload)
        result = await client.update_step_status(created["id"], "PROJE", "APPROVED", notes="Tamam")
        uploaded = await client.upload_document(
            created["id"], "BAGLANTI_GORUSU", "kroki.png", b"\x89PNG\r\n", "image/png"
        )
        content = await client.download_document(created["id"], "BAGLANTI_GORUSU", uploaded["id"])

        with pytest.raises(ApiClientError) as exc_info:
            await client.create_notification(bedas_payload)

    assert result["notification"]["current_step"] == "BAGLANTI_GORUSU"
    assert content == b"\x89PNG\r\n"
    assert exc_info.value.status_code == 409


@pytest.mark.asyncio
async def test_default_base_url_targets_api_v1(sleeps, monkeypatch):
    monkeypatch.setattr(settings, "backend_url", "http://backend.internal:8000/")
    paths = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append((request.url.host, request.url.path))
        return httpx.Response(200, json={"items": [], "total": 0, "page": 1, "page_size": 20, "pages": 0})

    async with EdasApiClient(token="test-token", transport=httpx.MockTransport(handler)) as client:
        await client.list_notifications()

    assert paths == [("backend.internal", "/api/v1/edas/notifications")]
