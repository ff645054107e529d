"""
Sentry error reporting.

Only server-side failures are reported: 4xx events are dropped, credential
headers are masked and health/metrics transactions are not traced.
"""
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from src.core.config import settings
from src.core.logging import get_logger

logger = get_logger(__name__)

_MASKED_HEADERS = frozenset({"authorization", "cookie", "x-api-key"})
_UNTRACED_PATHS = ("/health", "/metrics")


def init_sentry() -> bool:
    """Initialise the SDK when SENTRY_DSN is set. Returns whether it was enabled."""
    if not settings.sentry_dsn:
        logger.debug("Sentry disabled (no DSN)")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"edas-backoffice@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        send_default_pii=False,
        before_send=_before_send,
        before_send_transaction=_before_send_transaction,
    )
    logger.info("Sentry enabled", environment=settings.environment)
    return True


def _is_client_error(hint: dict[str, Any]) -> bool:
    exc_info = hint.get("exc_info")
    if not exc_info:
        return False
    status_code = getattr(exc_info[1], "status_code", None)
    return isinstance(status_code, int) and 400 <= status_code < 500


def _mask_headers(event: dict[str, Any]) -> None:
    headers = event.get("request", {}).get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in _MASKED_HEADERS:
                headers[name] = "[FILTERED]"


def _before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    if _is_client_error(hint):
        return None
    _mask_headers(event)
    return event


def _before_send_transaction(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    url = event.get("request", {}).get("url", "")
    if url.endswith(_UNTRACED_PATHS):
        return None
    return event


def set_user(user_id: str, email: str | None = None) -> None:
    sentry_sdk.set_user({"id": user_id, "email": email})
