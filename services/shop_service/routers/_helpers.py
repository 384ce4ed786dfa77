"""Shared dependencies for shop routers."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from libs.auth.dependencies import get_current_user, require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.shop_service.models import Customer
from sqlalchemy.ext.asyncio import AsyncSession


async def get_current_customer(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> Customer:
    """Load the stored customer behind the bearer token."""
    customer = await db.get(Customer, current_user.user_id)
    if customer is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown customer",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return customer


async def get_admin_customer(
    current_user: Annotated[AuthUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> Customer:
    """Admin check against the stored record, not just the token claim."""
    customer = await db.get(Customer, current_user.user_id)
    if customer is None or not customer.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return customer
