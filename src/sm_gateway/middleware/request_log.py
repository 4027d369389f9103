"""Request logging middleware.

One line per HTTP request with method, path, status, latency and a short
request id. The id is stored on request.state so handlers echo it in the
response envelope:

    INFO [POST] /api/v1/market/submissions/3/stake → 200 (4ms) req=a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sm.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = f"req_{uuid.uuid4().hex[:12]}"

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request.state.request_id
        logger.info(
            "[%s] %s → %d (%.0fms) req=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response


def request_id_of(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)
