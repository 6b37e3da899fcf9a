"""Rate limiting configuration using slowapi.

Signed-in callers are limited per uid, so users behind one NAT do not
share a budget; anonymous auth endpoints fall back to the client address.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from core.config import settings
from core.exceptions import ErrorCode


def rate_limit_key(request: Request) -> str:
    """Key requests by authenticated uid when known, else by client address."""
    uid = getattr(request.state, "uid", None)
    if uid:
        return f"uid:{uid}"
    return get_remote_address(request)


limiter = Limiter(key_func=rate_limit_key, enabled=settings.rate_limit_enabled)


async def rate_limit_exceeded_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer 429 in the standard error shape."""
    limit = exc.detail if isinstance(exc, RateLimitExceeded) else str(exc)
    return JSONResponse(
        status_code=429,
        content={
            "error_code": ErrorCode.RATE_LIMIT_EXCEEDED.value,
            "message": "Too many requests. Please slow down and try again.",
            "details": {"limit": str(limit)},
        },
    )
