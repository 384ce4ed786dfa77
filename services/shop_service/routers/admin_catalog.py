"""Admin catalog router: products, product types, customer discounts."""

from fastapi import APIRouter, Depends, HTTPException, status
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.shop_service.models import (
    AuditEntityType,
    Customer,
    Product,
    ProductType,
)
from services.shop_service.routers._helpers import get_admin_customer
from services.shop_service.schemas import (
    AdminProductResponse,
    CustomerDiscountUpdate,
    MeResponse,
    ProductCreate,
    ProductTypeCreate,
    ProductTypeResponse,
    ProductUpdate,
)
from services.shop_service.services.audit import log_audit
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)

router = APIRouter(tags=["admin-shop"])


async def _get_product(db: AsyncSession, product_id: int) -> Product:
    query = (
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.types))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(query)
    product = result.scalar_one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/products", response_model=list[AdminProductResponse])
async def list_all_products(
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """List all products (including inactive)."""
    query = (
        select(Product)
        .options(selectinload(Product.types))
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.post(
    "/products",
    response_model=AdminProductResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    product_in: ProductCreate,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a new product."""
    admin_id = current_user.id
    product = Product(**product_in.model_dump())
    db.add(product)
    await db.flush()

    log_audit(
        db,
        AuditEntityType.PRODUCT,
        product.id,
        "created",
        admin_id,
        new_value=product_in.model_dump(),
    )
    await db.commit()

    logger.info("Product %s created by admin %s", product.id, admin_id)
    return await _get_product(db, product.id)


@router.patch("/products/{product_id}", response_model=AdminProductResponse)
async def update_product(
    product_id: int,
    product_in: ProductUpdate,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Update a product. Price changes get their own audit action."""
    admin_id = current_user.id
    product = await _get_product(db, product_id)

    update_data = product_in.model_dump(exclude_unset=True, exclude_none=True)
    old_values = {field: getattr(product, field) for field in update_data}
    for field, value in update_data.items():
        setattr(product, field, value)

    price_changed = "price" in update_data and old_values["price"] != product.price
    log_audit(
        db,
        AuditEntityType.PRODUCT,
        product.id,
        "price_changed" if price_changed else "updated",
        admin_id,
        old_value=old_values,
        new_value=update_data,
    )
    await db.commit()

    if price_changed:
        logger.info(
            "Product %s price %d -> %d by admin %s",
            product.id,
            old_values["price"],
            product.price,
            admin_id,
        )
    return await _get_product(db, product.id)


# ============================================================================
# PRODUCT TYPES
# ============================================================================


@router.post(
    "/products/{product_id}/types",
    response_model=ProductTypeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product_type(
    product_id: int,
    type_in: ProductTypeCreate,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Add a type (variant) to a product."""
    admin_id = current_user.id
    product = await _get_product(db, product_id)

    product_type = ProductType(product_id=product.id, **type_in.model_dump())
    db.add(product_type)
    await db.flush()

    log_audit(
        db,
        AuditEntityType.PRODUCT_TYPE,
        product_type.id,
        "created",
        admin_id,
        new_value={"product_id": product.id, **type_in.model_dump()},
    )
    await db.commit()
    await db.refresh(product_type)
    return product_type


@router.delete("/product-types/{type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_type(
    type_id: int,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Delete a product type. Past order items keep their copied type name."""
    admin_id = current_user.id
    product_type = await db.get(ProductType, type_id)
    if not product_type:
        raise HTTPException(status_code=404, detail="Product type not found")

    log_audit(
        db,
        AuditEntityType.PRODUCT_TYPE,
        product_type.id,
        "deleted",
        admin_id,
        old_value={"product_id": product_type.product_id, "name": product_type.name},
    )
    await db.delete(product_type)
    await db.commit()
    return None


# ============================================================================
# CUSTOMERS
# ============================================================================


@router.patch("/users/{user_id}/discount", response_model=MeResponse)
async def set_customer_discount(
    user_id: int,
    discount_in: CustomerDiscountUpdate,
    current_user: Customer = Depends(get_admin_customer),
    db: AsyncSession = Depends(get_async_db),
):
    """Override a customer's loyalty discount until their next approval."""
    admin_id = current_user.id
    customer = await db.get(Customer, user_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")

    old_discount = customer.discount_percent
    customer.discount_percent = discount_in.discount_percent
    log_audit(
        db,
        AuditEntityType.CUSTOMER,
        customer.id,
        "discount_changed",
        admin_id,
        old_value={"discount_percent": old_discount},
        new_value={"discount_percent": customer.discount_percent},
    )
    await db.commit()
    await db.refresh(customer)
    return customer
