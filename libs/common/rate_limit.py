"""Rate limiting for shop endpoints.

Uses slowapi; state lives in ``RATE_LIMIT_STORAGE_URI`` (in-memory by default,
point it at Redis when running more than one worker).
"""

from functools import lru_cache
from typing import Callable

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from libs.auth.dependencies import unverified_claims
from libs.common.config import get_settings


def _get_client_ip(request: Request) -> str:
    """
    Get client IP from request, handling proxies.

    Checks X-Forwarded-For header first, then the direct connection IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


def _get_customer_or_ip(request: Request) -> str:
    """
    Rate limit by customer id from the bearer token, otherwise by IP.

    The signature is not checked here; a forged token only buys a separate
    bucket and is still refused by the auth dependency.
    """
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        claims = unverified_claims(token)
        if claims and claims.get("sub") is not None:
            return f"customer:{claims['sub']}"
    return f"ip:{_get_client_ip(request)}"


@lru_cache
def get_limiter() -> Limiter:
    """Create and return a cached Limiter instance."""
    settings = get_settings()
    return Limiter(
        key_func=_get_customer_or_ip,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


limiter = get_limiter()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Custom handler for rate limit exceeded errors.

    Returns a JSON response in the usual ``{"detail": ...}`` shape.
    """
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded ({exc.detail}). Try again later."},
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


def order_limit(func: Callable) -> Callable:
    """Limit order submission per customer (``ORDER_RATE_LIMIT``)."""
    return limiter.limit(get_settings().ORDER_RATE_LIMIT)(func)
