"""
Gestor de Expedientes Backend: Request Logging Middleware
==========================================================

What:  One log line per HTTP request with status and duration.
When:  After RequestIDMiddleware (uses request ID for correlation).

What we log vs what we don't:
    Log: method, path, status, duration, IP, request ID, principal
    Don't log: request bodies (case descriptions and observations may
    contain personal data)
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from gestor_expedientes.config import settings
from gestor_expedientes.middleware.request_id import request_id_var

logger = logging.getLogger("gestor_expedientes.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status, duration and principal of each request.

    Level follows the status class: 5xx → ERROR, 4xx → WARNING, else INFO.
    Health checks are not logged.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        principal = request.headers.get(settings.principal_header, "-")

        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        rid = request_id_var.get("")

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] user=%s from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            principal,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
                "principal": principal,
            },
        )

        return response
