"""Customer orders router: quote, submit, history."""

from fastapi import APIRouter, Depends, Request, status
from libs.common.rate_limit import order_limit
from libs.db.session import get_async_db
from services.shop_service.models import Customer
from services.shop_service.routers._helpers import get_current_customer
from services.shop_service.schemas import OrderCreate, OrderResponse, QuoteResponse
from services.shop_service.services import order_service
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["shop"])


@router.post("/orders/quote", response_model=QuoteResponse)
async def quote_order(
    order_in: OrderCreate,
    current_user: Customer = Depends(get_current_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Price a cart with current prices and discount without saving it."""
    _, breakdown = await order_service.quote_order(
        db, current_user, order_in.items, order_in.payment_method
    )
    return QuoteResponse.from_breakdown(breakdown)


@router.post(
    "/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
@order_limit
async def create_order(
    request: Request,
    order_in: OrderCreate,
    current_user: Customer = Depends(get_current_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Submit the cart as a pending order."""
    return await order_service.submit_order(
        db,
        customer_id=current_user.id,
        items=order_in.items,
        payment_method=order_in.payment_method,
    )


@router.get("/orders", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: Customer = Depends(get_current_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """The current customer's orders, newest first."""
    return await order_service.list_customer_orders(db, current_user.id)


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_my_order(
    order_id: int,
    current_user: Customer = Depends(get_current_customer),
    db: AsyncSession = Depends(get_async_db),
):
    return await order_service.get_order(db, order_id, user_id=current_user.id)
