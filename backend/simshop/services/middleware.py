"""Request tracing for the shop API: request ids, timing headers, one access log line per call."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from simshop.services.logging_config import request_id_ctx

logger = logging.getLogger("simshop-api.middleware")

SKIP_LOG_PATHS = {"/health"}
REQUEST_ID_HEADER = "X-Request-ID"


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        # Rejected quotes and orders are expected traffic, but worth seeing
        return logging.WARNING
    return logging.INFO


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    - Reuses the caller's X-Request-ID (storefront correlation) or assigns a uuid4.
    - Publishes the id through ``request_id_ctx`` so engine logs carry it.
    - Adds X-Request-ID and X-Process-Time (ms) to every response.
    - Logs one line per request except /health, at a level derived from the status.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)
        start_time = time.perf_counter()

        context = {
            "http_method": request.method,
            "http_path": request.url.path,
            "request_id": request_id,
        }
        try:
            response: Response = await call_next(request)
        except Exception:
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.exception("request failed", extra={**context, "duration_ms": duration_ms})
            raise
        finally:
            request_id_ctx.reset(token)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)

        if request.url.path not in SKIP_LOG_PATHS:
            logger.log(
                _level_for(response.status_code),
                "request completed",
                extra={**context, "http_status": response.status_code, "duration_ms": duration_ms},
            )
        return response
