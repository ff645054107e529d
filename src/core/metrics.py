"""
Prometheus metrics, scraped from GET /metrics.

HTTP request count/latency are labelled by route template, never by raw
path, so notification ids do not explode label cardinality.
"""
import time

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, Info, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from src.core.config import settings

APP_INFO = Info("edas_app", "EDAS back-office build info")
APP_INFO.info({"version": settings.app_version, "environment": settings.environment})

REQUEST_COUNT = Counter(
    "edas_http_requests_total",
    "HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "edas_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Workflow counters
NOTIFICATIONS_CREATED = Counter(
    "edas_notifications_created_total",
    "Notifications created",
    ["company"],
)
STEP_TRANSITIONS = Counter(
    "edas_step_transitions_total",
    "Step status writes",
    ["company", "status"],
)
DOCUMENTS_UPLOADED = Counter(
    "edas_documents_uploaded_total",
    "Documents attached to steps",
    ["company"],
)
UPLOAD_BYTES = Histogram(
    "edas_document_upload_bytes",
    "Size of stored documents",
    buckets=[10_000, 100_000, 1_000_000, 5_000_000, 10_000_000],
)

_UNMEASURED_PATHS = frozenset({"/metrics"})


def _route_label(request: Request, route) -> str:
    """Public route template, e.g. /api/v1/edas/notifications/{notification_id}."""
    if route is None:
        return "unmatched"
    template = getattr(route, "path_format", None) or route.path
    # Depending on the FastAPI version the include prefix is not part of the
    # route template; recover it from the leading segments of the real path.
    # Every template segment matches exactly one URL segment.
    url_parts = request.url.path.rstrip("/").split("/")
    extra = len(url_parts) - len(template.rstrip("/").split("/"))
    if extra <= 0:
        return template
    return "/".join(url_parts[: extra + 1]) + template


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> StarletteResponse:
        if request.url.path in _UNMEASURED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        # The matched route is only known after routing ran
        route = request.scope.get("route")
        endpoint = _route_label(request, route)

        REQUEST_COUNT.labels(request.method, endpoint, response.status_code).inc()
        REQUEST_LATENCY.labels(request.method, endpoint).observe(elapsed)
        return response


router = APIRouter(tags=["Health"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


def record_notification_created(company: str) -> None:
    NOTIFICATIONS_CREATED.labels(company=company).inc()


def record_step_transition(company: str, status: str) -> None:
    STEP_TRANSITIONS.labels(company=company, status=status).inc()


def record_document_uploaded(company: str, size: int | None = None) -> None:
    DOCUMENTS_UPLOADED.labels(company=company).inc()
    if size is not None:
        UPLOAD_BYTES.observe(size)
