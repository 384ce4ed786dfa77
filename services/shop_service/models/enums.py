"""Enum definitions for shop service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    BANK = "bank"
    INSTALLMENT = "installment"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class OrderStatusFilter(str, enum.Enum):
    ALL = "all"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AuditEntityType(str, enum.Enum):
    PRODUCT = "product"
    PRODUCT_TYPE = "product_type"
    ORDER = "order"
    CUSTOMER = "customer"
