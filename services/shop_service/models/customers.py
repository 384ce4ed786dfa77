"""Customer accounts as seen by the shop."""

from datetime import datetime

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship


class Customer(Base):
    """Registered customers (accounts are created by the auth service)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    car_brand: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Count of *approved* orders; drives the loyalty tier
    orders_count: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )
    discount_percent: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0", nullable=False
    )

    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default="false", nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    __table_args__ = (
        CheckConstraint(
            "discount_percent >= 0 AND discount_percent <= 100",
            name="customer_discount_percent_range",
        ),
    )

    orders = relationship("Order", back_populates="customer")

    def __repr__(self):
        return f"<Customer {self.id} {self.phone}>"
