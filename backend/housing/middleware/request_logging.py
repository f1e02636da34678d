"""
Request logging middleware: method, path, status, duration and client ip per request.

Endpoints that compute routes leave a RoutesSummary on request.state; it is
appended to the log line and counted in the road/straight route metrics.
"""
import logging
import time
from typing import NamedTuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from housing.monitoring.metrics import record_request, record_routes

logger = logging.getLogger(__name__)


class RoutesSummary(NamedTuple):
    mode: str
    road: int
    straight: int


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        record_request(response.status_code)

        summary: RoutesSummary | None = getattr(request.state, "routes_summary", None)
        if summary is None:
            logger.info(
                "request method=%s path=%s status=%s duration_ms=%.1f client=%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                _client_ip(request),
            )
            return response

        record_routes(road=summary.road, straight=summary.straight)
        logger.info(
            "request method=%s path=%s status=%s duration_ms=%.1f client=%s mode=%s road=%s straight=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            _client_ip(request),
            summary.mode,
            summary.road,
            summary.straight,
            extra={"mode": summary.mode, "road": summary.road, "straight": summary.straight},
        )
        return response
