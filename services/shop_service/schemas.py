"""Pydantic schemas for shop service."""

from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_day_end, utc_day_start
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)
from services.shop_service.models import (
    Order,
    OrderStatus,
    OrderStatusFilter,
    PaymentMethod,
)
from services.shop_service.pricing import PriceBreakdown

# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    image_url: str = Field("", max_length=512)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Type name is required")
        return v


class ProductTypeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    name: str
    image_url: str


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0)
    discount_percent: int = Field(0, ge=0, le=100)
    active: bool = True


class ProductCreate(ProductBase):
    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[int] = Field(None, ge=0)
    discount_percent: Optional[int] = Field(None, ge=0, le=100)
    active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Product name is required")
        return v


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    types: list[ProductTypeResponse] = []


class AdminProductResponse(ProductResponse):
    created_at: datetime
    updated_at: datetime


# ============================================================================
# CUSTOMER SCHEMAS
# ============================================================================


class MeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phone: str
    name: str
    car_brand: str
    orders_count: int
    discount_percent: int
    is_admin: bool

    @computed_field
    @property
    def discount(self) -> int:
        """Same value as ``discount_percent``; the storefront reads this name."""
        return self.discount_percent


class CustomerDiscountUpdate(BaseModel):
    discount_percent: int = Field(..., ge=0, le=100)


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1, le=10_000)
    type_id: Optional[int] = None


class OrderCreate(BaseModel):
    """Submitted cart. An empty ``items`` list is rejected by the service."""

    items: list[OrderItemCreate]
    payment_method: PaymentMethod = PaymentMethod.CASH


class OrderItemType(BaseModel):
    id: int
    name: str
    image_url: Optional[str] = None


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    product_name: str
    type_id: Optional[int]
    type_name: Optional[str]
    quantity: int
    original_price: int
    price: int
    product_discount_percent: int
    line_total: int

    type_image_url: Optional[str] = Field(None, exclude=True)

    @computed_field
    @property
    def type(self) -> Optional[OrderItemType]:
        if self.type_id is None:
            return None
        return OrderItemType(
            id=self.type_id, name=self.type_name or "", image_url=self.type_image_url
        )


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user_order_number: int
    payment_method: PaymentMethod
    status: OrderStatus

    total_amount: int
    product_discount_amount: int
    discount_percent: int
    customer_discount_amount: int
    installment_fee: int
    final_amount: int

    decided_at: Optional[datetime] = None
    created_at: datetime

    items: list[OrderItemResponse] = []


class AdminOrderResponse(OrderResponse):
    user_name: str
    user_phone: str
    user_car: str

    @classmethod
    def from_order(cls, order: Order) -> "AdminOrderResponse":
        base = OrderResponse.model_validate(order).model_dump(exclude={"items"})
        return cls(
            **base,
            items=[OrderItemResponse.model_validate(i) for i in order.items],
            user_name=order.customer.name,
            user_phone=order.customer.phone,
            user_car=order.customer.car_brand,
        )


class OrderListResponse(BaseModel):
    """Paginated order list."""

    items: list[AdminOrderResponse]
    total: int
    page: int
    limit: int
    pages: int


class OrderCountsResponse(BaseModel):
    all: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0


class QuoteLine(BaseModel):
    product_id: int
    product_name: str
    type_id: Optional[int]
    quantity: int
    original_price: int
    price: int
    product_discount_percent: int
    line_total: int


class QuoteResponse(BaseModel):
    """Breakdown computed from current prices; nothing is stored."""

    payment_method: PaymentMethod
    subtotal_original: int
    subtotal_after_product_discount: int
    product_discount_amount: int
    customer_discount_percent: int
    customer_discount_amount: int
    final_before_surcharge: int
    installment_fee: int
    final_payable: int
    lines: list[QuoteLine]

    @classmethod
    def from_breakdown(cls, breakdown: PriceBreakdown) -> "QuoteResponse":
        return cls(
            **breakdown.as_dict(),
            lines=[
                QuoteLine(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    type_id=line.type_id,
                    quantity=line.quantity,
                    original_price=line.original_price,
                    price=line.unit_price,
                    product_discount_percent=line.product_discount_percent,
                    line_total=line.line_total,
                )
                for line in breakdown.lines
            ],
        )


# ============================================================================
# QUERY PARAMETERS
# ============================================================================


class OrderListParams(BaseModel):
    """Admin order listing filter. Counts and pages are computed server-side."""

    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)
    q: Optional[str] = Field(None, max_length=100)
    status: OrderStatusFilter = OrderStatusFilter.ALL

    @field_validator("q")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def status_value(self) -> Optional[OrderStatus]:
        if self.status is OrderStatusFilter.ALL:
            return None
        return OrderStatus(self.status.value)


class ReportParams(BaseModel):
    """Order report window; both ends inclusive."""

    date_from: date
    date_to: date
    user_id: Optional[int] = None

    @model_validator(mode="after")
    def check_range(self) -> "ReportParams":
        if self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self

    @property
    def start(self) -> datetime:
        return utc_day_start(self.date_from)

    @property
    def end(self) -> datetime:
        """Exclusive upper bound: midnight after ``date_to``."""
        return utc_day_end(self.date_to)


class ReportRow(BaseModel):
    order_id: int
    user_order_number: int
    user_id: int
    user_name: str
    user_phone: str
    user_car: str
    created_at: datetime
    payment_method: PaymentMethod
    status: OrderStatus
    items_count: int
    total_amount: int
    discount_percent: int
    installment_fee: int
    final_amount: int


class ReportSummary(BaseModel):
    orders: int = 0
    total_amount: int = 0
    final_amount: int = 0
    approved_final_amount: int = 0


class ReportResponse(BaseModel):
    date_from: date
    date_to: date
    user_id: Optional[int] = None
    rows: list[ReportRow]
    summary: ReportSummary
