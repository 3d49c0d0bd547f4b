"""Custom Middleware"""

import re
import time
import uuid
from typing import Callable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from billboard.core.logging import correlation_id_var, get_logger, shop_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
QUIET_PATHS = {"/health", "/"}

_SHOP_PATH = re.compile(r"/shops/([0-9a-fA-F-]{36})(?:/|$)")


def shop_id_from_path(path: str) -> Optional[str]:
    match = _SHOP_PATH.search(path)
    return match.group(1).lower() if match else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id and the shop being addressed to the logging context.
    An incoming X-Request-ID is kept so ids line up across services.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        id_token = correlation_id_var.set(request_id)
        shop_token = shop_id_var.set(shop_id_from_path(request.url.path))
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(id_token)
            shop_id_var.reset(shop_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Log request processing time"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.6f}"

        # Probes would drown out billing traffic at INFO
        level = "debug" if request.url.path in QUIET_PATHS else "info"
        getattr(logger, level)(
            f"{request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time": process_time,
            }
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Security headers; API responses carry billing data and are never cached"""

    def __init__(self, app, api_prefix: str):
        super().__init__(app)
        self.api_prefix = api_prefix

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        if request.url.path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store"

        return response
