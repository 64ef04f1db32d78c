"""
Logging Middleware - Request/Response logging
"""
import time
from typing import Callable
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from backend.utils.logger import get_logger

logger = get_logger(__name__)

QUIET_PATHS = {"/api/v1/health", "/api/v1/health/dependencies"}
REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every API call with a request id

    The id is taken from X-Request-ID when the caller sends one and echoed
    back on the response together with X-Process-Time (ms).
    """

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex[:12]
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "reporter": request.headers.get("X-User-ID"),
        }
        start_time = time.time()

        logger.info(f"[{request_id}] → {request.method} {request.url.path}", extra=context)

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                f"[{request_id}] ✗ {request.method} {request.url.path} ERROR ({duration_ms}ms): {e}",
                extra={**context, "duration_ms": duration_ms},
                exc_info=True
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"[{request_id}] ← {request.method} {request.url.path} {response.status_code} ({duration_ms}ms)",
            extra={**context, "status_code": response.status_code, "duration_ms": duration_ms}
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)
        return response
