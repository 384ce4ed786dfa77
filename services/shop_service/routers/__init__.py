"""Shop service routers package."""

from services.shop_service.routers.admin_catalog import router as admin_catalog_router
from services.shop_service.routers.admin_orders import router as admin_orders_router
from services.shop_service.routers.admin_reports import router as admin_reports_router
from services.shop_service.routers.catalog import router as catalog_router
from services.shop_service.routers.member import router as member_router
from services.shop_service.routers.orders import router as orders_router

__all__ = [
    "admin_catalog_router",
    "admin_orders_router",
    "admin_reports_router",
    "catalog_router",
    "member_router",
    "orders_router",
]
