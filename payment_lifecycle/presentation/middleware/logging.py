"""Request/response logging middleware with timing and HTTP metrics."""

import time
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from payment_lifecycle.core.config import settings
from payment_lifecycle.core.metrics import record_http_request

logger = structlog.get_logger(__name__)

UNMATCHED_ENDPOINT = "unmatched"


def _endpoint_label(request: Request) -> str:
    """Route template (``/v1/client-payments/{agreement_id}``) to keep label cardinality low."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ENDPOINT


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start, completion, and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        log = logger.bind(method=method, path=path)
        log.info(
            "request_started",
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            log.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.perf_counter() - start_time
        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2),
        )

        if settings.metrics_enabled and path != "/metrics":
            record_http_request(method, _endpoint_label(request), response.status_code, duration)

        return response
