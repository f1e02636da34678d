from housing.middleware.auth import OptionalAPIKeyMiddleware, get_valid_api_keys
from housing.middleware.request_logging import RequestLoggingMiddleware, RoutesSummary

__all__ = ["OptionalAPIKeyMiddleware", "RequestLoggingMiddleware", "RoutesSummary", "get_valid_api_keys"]
