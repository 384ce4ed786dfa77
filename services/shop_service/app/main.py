"""FastAPI application for the Shop Service."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.shop_service.routers import (
    admin_catalog_router,
    admin_orders_router,
    admin_reports_router,
    catalog_router,
    member_router,
    orders_router,
)


def create_app() -> FastAPI:
    """Create and configure the Shop Service FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="Auto Parts Shop Service",
        version="0.1.0",
        description="Auto parts catalog, order pricing and order approval.",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Structured logging + request tracing
    add_observability_middleware(app)

    # Domain errors -> {"detail": ...}
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "shop"}

    # Customer routes
    app.include_router(catalog_router)
    app.include_router(member_router)
    app.include_router(orders_router)

    # Admin routes
    app.include_router(admin_catalog_router, prefix="/admin")
    app.include_router(admin_orders_router, prefix="/admin")
    app.include_router(admin_reports_router, prefix="/admin")

    return app


app = create_app()
