from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "x-auth-token", "x-authorization"})


def redact_headers(headers) -> dict[str, str]:
    return {
        key: "[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with redacted headers and the verified caller.

    Must be installed outside ``JWTAuthMiddleware`` so ``request.state.auth``
    is populated by the time the response comes back.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        start = time.perf_counter()
        logger.info(
            f"Request: {request.method} {request.url.path} Headers: {redact_headers(request.headers)}"
        )

        response = await call_next(request)

        claims = getattr(request.state, "auth", None)
        if claims is not None:
            caller = f"User(id={claims.user_id}, master={claims.is_master})"
        else:
            caller = "Anonymous"
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Response: {request.method} {request.url.path} {caller} "
            f"status={response.status_code} duration_ms={elapsed_ms:.1f}"
        )
        return response
