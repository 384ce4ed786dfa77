"""Shop commerce models: orders, order items, audit logs."""

from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.shop_service.models.enums import (
    AuditEntityType,
    OrderStatus,
    PaymentMethod,
    enum_values,
)
from sqlalchemy import JSON, CheckConstraint, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

JSONType = JSON().with_variant(JSONB, "postgresql")

# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """Orders, priced authoritatively at submission time."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    # 1-based sequence of this customer's orders ("your order #3")
    user_order_number: Mapped[int] = mapped_column(Integer, nullable=False)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            values_callable=enum_values,
            name="payment_method_enum",
        ),
        nullable=False,
    )

    # Breakdown (whole currency units)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    product_discount_amount: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    discount_percent: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )  # Customer loyalty discount at submit time
    customer_discount_amount: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    installment_fee: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    final_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(
            OrderStatus,
            values_callable=enum_values,
            name="order_status_enum",
        ),
        default=OrderStatus.PENDING,
        server_default="pending",
        nullable=False,
    )

    # Approve/reject bookkeeping
    decided_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    decided_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, index=True
    )

    __table_args__ = (
        UniqueConstraint("user_id", "user_order_number", name="unique_user_order_number"),
        CheckConstraint("total_amount >= 0", name="order_total_non_negative"),
        Index("ix_orders_status_created_at", "status", "created_at"),
    )

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )
    customer = relationship("Customer", back_populates="orders")

    def __repr__(self):
        return f"<Order {self.id} status={self.status}>"


class OrderItem(Base):
    """Order line items (frozen snapshot at order time)."""

    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Soft references: the catalog may change or delete these later
    product_id: Mapped[int] = mapped_column(Integer, nullable=False)
    type_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    type_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    type_image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    original_price: Mapped[int] = mapped_column(Integer, nullable=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False)  # after product discount
    product_discount_percent: Mapped[int] = mapped_column(Integer, nullable=False)
    line_total: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("quantity > 0", name="order_item_positive_quantity"),)

    # Relationships
    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.product_name} qty={self.quantity}>"


# ============================================================================
# AUDIT LOG MODEL
# ============================================================================


class ShopAuditLog(Base):
    """Audit log for admin actions on the catalog and orders."""

    __tablename__ = "shop_audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    entity_type: Mapped[AuditEntityType] = mapped_column(
        SAEnum(
            AuditEntityType,
            values_callable=enum_values,
            name="audit_entity_type_enum",
        ),
        nullable=False,
    )
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)

    action: Mapped[str] = mapped_column(
        String(50), nullable=False
    )  # e.g., "price_changed", "approved"

    old_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    new_value: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    performed_by: Mapped[int] = mapped_column(Integer, nullable=False)
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_shop_audit_logs_entity", "entity_type", "entity_id"),
    )

    def __repr__(self):
        return f"<ShopAuditLog {self.entity_type}:{self.entity_id} {self.action}>"
