from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.logging import bind_request_id, get_request_id, unbind_request_id

logger = logging.getLogger("storefront.request")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id for log correlation and echoes it back to the caller."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        token = bind_request_id(request.headers.get("x-request-id"))
        request_id = get_request_id() or ""

        started = time.perf_counter()
        extra: dict[str, object] = {"path": request.url.path, "method": request.method}
        logger.info("request.start", extra=extra)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            extra["status_code"] = status_code
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.info("request.end", extra=extra)
            unbind_request_id(token)

        response.headers["X-Request-ID"] = request_id
        return response
