"""
EDAŞ Back-office API Client
Async HTTP client used by the proxy layer to talk to the back-office API (BACKEND_URL).

GET requests are retried on transport errors and 5xx responses with
exponential backoff; non-idempotent requests are sent once.
"""
import asyncio
import uuid
from typing import Any

import httpx

from src.core.config import settings
from src.core.logging import get_logger

logger = get_logger(__name__)


class ApiClientError(Exception):
    """Error response (or no response) from the back-office API."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


class EdasApiClient:
    """
    Back-office API client.

    Usage:
        async with EdasApiClient(token=token) as client:
            page = await client.list_notifications(company="BEDAŞ")
            await client.update_step_status(notification_id, "PROJE", "APPROVED")
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: API root, e.g. "http://localhost:8000/api/v1" (default: BACKEND_URL + /api/v1)
            token: Bearer token sent with every request
            max_retries: Extra attempts for GET requests
            backoff_base: Seconds; attempt n waits backoff_base * 2**n
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        if base_url is None:
            base_url = settings.backend_url.rstrip("/") + settings.api_v1_str
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.max_retries = settings.client_max_retries if max_retries is None else max_retries
        self.backoff_base = settings.client_backoff_base if backoff_base is None else backoff_base
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "EdasApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    # ============== Transport ==============

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        attempts = 1 + (self.max_retries if method == "GET" else 0)

        for attempt in range(attempts):
            retryable = attempt < attempts - 1
            try:
                response = await client.request(method, path, **kwargs)
            except httpx.TransportError as e:
                if not retryable:
                    logger.error("API request failed", method=method, path=path, error=str(e))
                    raise ApiClientError(503, f"Backend unreachable: {e}") from e
                logger.warning("API request error, retrying", method=method, path=path, attempt=attempt + 1, error=str(e))
            else:
                if response.status_code < 500 or not retryable:
                    return self._check(response)
                logger.warning(
                    "API server error, retrying",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    attempt=attempt + 1,
                )

            await asyncio.sleep(self.backoff_base * 2 ** attempt)  # Exponential backoff

        raise ApiClientError(503, "Backend unreachable")

    @staticmethod
    def _check(response: httpx.Response) -> httpx.Response:
        if response.is_success:
            return response

        message = response.reason_phrase or "Request failed"
        payload: Any = None
        try:
            payload = response.json()
            error = payload.get("error") if isinstance(payload, dict) else None
            if isinstance(error, dict) and error.get("message"):
                message = error["message"]
            elif isinstance(payload, dict) and payload.get("detail"):
                message = str(payload["detail"])
        except ValueError:
            payload = response.text

        logger.warning("API error response", status_code=response.status_code, message=message)
        raise ApiClientError(response.status_code, message, payload)

    # ============== Auth ==============

    async def login(self, email: str, password: str) -> str:
        """Log in and keep the token for subsequent requests."""
        response = await self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = response.json()["access_token"]
        self._get_client().headers["Authorization"] = f"Bearer {self.token}"
        return self.token

    # ============== Notifications ==============

    async def list_notifications(
        self,
        company: str | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"page": page, "page_size": page_size}
        if company:
            params["company"] = company
        if status:
            params["status"] = status
        response = await self._request("GET", "/edas/notifications", params=params)
        return response.json()

    async def get_notification(self, notification_id: uuid.UUID | str) -> dict[str, Any]:
        response = await self._request("GET", f"/edas/notifications/{notification_id}")
        return response.json()

    async def create_notification(self, data: dict[str, Any]) -> dict[str, Any]:
        response = await self._request("POST", "/edas/notifications", json=data)
        return response.json()

    async def delete_notification(self, notification_id: uuid.UUID | str) -> None:
        await self._request("DELETE", f"/edas/notifications/{notification_id}")

    async def update_step_status(
        self,
        notification_id: uuid.UUID | str,
        step_type: str,
        status: str,
        notes: str | None = None,
    ) -> dict[str, Any]:
        """Returns {"step": ..., "notification": ...}."""
        body: dict[str, Any] = {"status": status}
        if notes is not None:
            body["notes"] = notes
        response = await self._request(
            "PUT",
            f"/edas/notifications/{notification_id}/steps/{step_type}",
            json=body,
        )
        return response.json()

    # ============== Documents ==============

    async def upload_document(
        self,
        notification_id: uuid.UUID | str,
        step_type: str,
        filename: str,
        content: bytes,
        content_type: str,
        document_type: str | None = None,
    ) -> dict[str, Any]:
        data = {"document_type": document_type} if document_type else None
        response = await self._request(
            "POST",
            f"/edas/notifications/{notification_id}/steps/{step_type}/documents",
            files={"file": (filename, content, content_type)},
            data=data,
        )
        return response.json()

    async def download_document(
        self,
        notification_id: uuid.UUID | str,
        step_type: str,
        document_id: uuid.UUID | str,
    ) -> bytes:
        response = await self._request(
            "GET",
            f"/edas/notifications/{notification_id}/steps/{step_type}/documents/{document_id}",
        )
        return response.content
