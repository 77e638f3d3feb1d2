"""
Request rate limiting
A single per-address budget shared by every route, plus the stricter
per-route limits declared with ``@limiter.limit`` on the auth endpoints
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from limits import parse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from app.config import RATE_LIMIT, RATE_LIMIT_ENABLED

logger = logging.getLogger(__name__)

TOO_MANY_REQUESTS_MESSAGE = "Too many requests, please try again later."

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

GLOBAL_LIMIT = parse(RATE_LIMIT)
GLOBAL_SCOPE = "global"

def _too_many_requests() -> JSONResponse:
    return JSONResponse(status_code=429, content={"message": TOO_MANY_REQUESTS_MESSAGE})

async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)} on {request.url.path}: {exc.detail}")
    return _too_many_requests()

class GlobalRateLimitMiddleware(BaseHTTPMiddleware):
    """Counts every request against one bucket per client address.

    Hits go through the limiter's own storage, so ``limiter.enabled`` and
    ``limiter.reset()`` govern this budget as well as the per-route ones.
    """

    async def dispatch(self, request: Request, call_next):
        if limiter.enabled:
            address = get_remote_address(request)
            if not limiter.limiter.hit(GLOBAL_LIMIT, GLOBAL_SCOPE, address):
                logger.warning(f"Global rate limit ({RATE_LIMIT}) exceeded for {address} on {request.url.path}")
                return _too_many_requests()

        return await call_next(request)
