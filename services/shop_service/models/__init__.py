"""Shop Service models package."""

from services.shop_service.models.catalog import Product, ProductType
from services.shop_service.models.commerce import Order, OrderItem, ShopAuditLog
from services.shop_service.models.customers import Customer
from services.shop_service.models.enums import (
    AuditEntityType,
    OrderStatus,
    OrderStatusFilter,
    PaymentMethod,
)

__all__ = [
    "AuditEntityType",
    "Customer",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusFilter",
    "PaymentMethod",
    "Product",
    "ProductType",
    "ShopAuditLog",
]
