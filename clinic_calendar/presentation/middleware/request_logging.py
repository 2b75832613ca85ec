"""
Request logging middleware.

Logs one line per request with method, path, scope query parameter, status
and duration. Bodies are never logged.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs request outcome and timing."""

    def __init__(self, app: ASGIApp, logger: logging.Logger | None = None) -> None:
        super().__init__(app)
        self.logger = logger or logging.getLogger(__name__)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start_time = time.perf_counter()
        request_id = getattr(request.state, "request_id", "N/A")
        scope = request.query_params.get("scope")
        target = f"{request.method} {request.url.path}" + (f" scope={scope}" if scope else "")

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.error(
                f"Request failed: {target} [{request_id}] after {duration_ms:.2f}ms",
                exc_info=True,
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            f"{target} -> {response.status_code} [{request_id}] {duration_ms:.2f}ms",
        )
        return response
