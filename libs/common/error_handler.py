"""Exception handlers that turn shop domain errors into JSON responses.

Every error body has the shape ``{"detail": "..."}`` so clients can surface
the message the same way they do for ``HTTPException``.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from libs.common.errors import ShopError
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Shop error on %s: %s", request.url.path, exc.detail)
    else:
        logger.info(
            "Rejected %s %s: %s", request.method, request.url.path, exc.detail
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


def add_exception_handlers(app: FastAPI) -> None:
    """Register the shop exception handlers on ``app``."""
    app.add_exception_handler(ShopError, shop_error_handler)
