"""Request middleware for tracing and logging."""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from washrelay.logging import bind_context, clear_context, get_logger
from washrelay.metrics import record_request

logger = get_logger(__name__)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Adds request ids and timing to every request.

    - A short ``request_id`` is generated per request
    - ``X-Correlation-ID`` is taken from the request or generated
    - Both are bound to the log context and echoed as response headers
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = uuid.uuid4().hex[:8]
        correlation_id = request.headers.get("X-Correlation-ID") or uuid.uuid4().hex[:8]

        clear_context()
        bind_context(
            request_id=request_id,
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
        )
        request.state.request_id = request_id

        logger.debug(
            "request_started",
            client_host=request.client.host if request.client else None,
        )
        start_time = time.perf_counter()

        try:
            response = await call_next(request)

            duration = time.perf_counter() - start_time
            logger.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )

            path = route_path(request)
            if not path.startswith("/metrics"):
                record_request(request.method, path, response.status_code, duration)

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Correlation-ID"] = correlation_id
            return response

        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        finally:
            clear_context()


def route_path(request: Request) -> str:
    """Path template of the matched route, e.g. "/v1/machines/{machine_id}".

    Keeps metric labels bounded; requests that matched no route share one label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", "<unmatched>")
