"""Customer profile router."""

from fastapi import APIRouter, Depends
from services.shop_service.models import Customer
from services.shop_service.routers._helpers import get_current_customer
from services.shop_service.schemas import MeResponse

router = APIRouter(tags=["shop"])


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: Customer = Depends(get_current_customer)):
    """Current customer, including the loyalty discount used for pricing."""
    return current_user
