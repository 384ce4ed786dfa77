"""Public catalog router."""

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.shop_service.models import Customer, Product
from services.shop_service.routers._helpers import get_current_customer
from services.shop_service.schemas import ProductResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

router = APIRouter(tags=["shop"])


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    current_user: Customer = Depends(get_current_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """List active products with their types."""
    query = (
        select(Product)
        .where(Product.active.is_(True))
        .options(selectinload(Product.types))
        .order_by(Product.name, Product.id)
    )
    result = await db.execute(query)
    return result.scalars().all()
