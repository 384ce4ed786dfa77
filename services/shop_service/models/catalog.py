"""Shop catalog models: products and their types (variants)."""

from datetime import datetime

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Product(Base):
    """Parts sold in the shop (e.g., 'Brake pads, front')."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Whole currency units
    price: Mapped[int] = mapped_column(Integer, nullable=False)
    # Flat percentage off price (promo)
    discount_percent: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default="true", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="product_price_non_negative"),
        CheckConstraint(
            "discount_percent >= 0 AND discount_percent <= 100",
            name="product_discount_percent_range",
        ),
    )

    # Relationships
    types = relationship(
        "ProductType",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductType.id",
    )

    def __repr__(self):
        return f"<Product {self.name}>"


class ProductType(Base):
    """A named, illustrated variant of a product (e.g., 'Toyota Camry 40')."""

    __tablename__ = "product_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    image_url: Mapped[str] = mapped_column(String(512), nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    # Relationships
    product = relationship("Product", back_populates="types")

    def __repr__(self):
        return f"<ProductType {self.name} product={self.product_id}>"
