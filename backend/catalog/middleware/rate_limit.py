"""Rate limiting middleware for FastAPI applications."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalog.core.errors import RateLimitedError
from catalog.core.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

EXEMPT_PATHS = frozenset({"/api/v1/healthcheck", "/docs", "/redoc", "/openapi.json"})


def client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    """Network origin of the request, used as the bucket key."""
    if trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Admit or refuse each request before any authentication happens."""

    def __init__(self, app: Any, rate_limiter: RateLimiter, trust_forwarded_for: bool = False) -> None:
        super().__init__(app)
        self.limiter = rate_limiter
        self.trust_forwarded_for = trust_forwarded_for

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        key = client_key(request, self.trust_forwarded_for)
        result = await self.limiter.check(key)

        if not result.allowed:
            logger.info(
                "Rate limit exceeded for %s",
                key,
                extra={"client": key, "path": request.url.path, "retry_after": result.retry_after},
            )
            error = RateLimitedError(result.retry_after or 1)
            return JSONResponse(
                status_code=error.http_status,
                content=error.to_response(),
                headers=result.headers,
            )

        response = await call_next(request)
        for name, value in result.headers.items():
            response.headers[name] = value
        return response
