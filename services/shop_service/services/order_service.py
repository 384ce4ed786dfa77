"""Order operations: authoritative pricing, submission, approve/reject, queries."""

from typing import Iterable, Optional, Sequence, Union

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFound
from libs.common.logging import get_logger
from libs.common.money import format_amount
from services.shop_service import lifecycle, loyalty
from services.shop_service.cart import Cart, CartValidationError, ProductSnapshot
from services.shop_service.exceptions import (
    EmptyCartError,
    InvalidOrderItemError,
    OrderNotFoundError,
    OrderStateConflict,
)
from services.shop_service.models import (
    AuditEntityType,
    Customer,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    Product,
)
from services.shop_service.pricing import PriceBreakdown, price_cart
from services.shop_service.schemas import OrderItemCreate, OrderListParams, ReportParams
from services.shop_service.services.audit import log_audit
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def get_customer(
    db: AsyncSession, customer_id: int, *, for_update: bool = False
) -> Customer:
    query = select(Customer).where(Customer.id == customer_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    result = await db.execute(query)
    customer = result.scalar_one_or_none()
    if customer is None:
        raise NotFound("Customer not found")
    return customer


async def load_products(db: AsyncSession, product_ids: Iterable[int]) -> dict[int, Product]:
    ids = set(product_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Product).where(Product.id.in_(ids)).options(selectinload(Product.types))
    )
    return {p.id: p for p in result.scalars().all()}


def _order_query():
    return select(Order).options(
        selectinload(Order.items), selectinload(Order.customer)
    )


async def get_order(
    db: AsyncSession, order_id: int, *, user_id: Optional[int] = None
) -> Order:
    """Fetch an order with items; ``user_id`` restricts to that customer's orders."""
    query = _order_query().where(Order.id == order_id)
    if user_id is not None:
        query = query.where(Order.user_id == user_id)
    result = await db.execute(query.execution_options(populate_existing=True))
    order = result.scalar_one_or_none()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


def build_cart(items: Sequence[OrderItemCreate], products: dict[int, Product]) -> Cart:
    """Rebuild a cart from submitted items against stored products.

    Repeated (product, type) pairs are merged into one line.
    """
    cart = Cart()
    snapshots: dict[int, ProductSnapshot] = {}
    for item in items:
        product = products.get(item.product_id)
        if product is None or not product.active:
            raise InvalidOrderItemError(f"Product {item.product_id} is not available")
        snapshot = snapshots.get(product.id)
        if snapshot is None:
            snapshot = snapshots[product.id] = ProductSnapshot.from_model(product)
        try:
            cart.add(snapshot, item.type_id, quantity=item.quantity)
        except CartValidationError as e:
            raise InvalidOrderItemError(str(e))
    return cart


async def quote_order(
    db: AsyncSession,
    customer: Customer,
    items: Sequence[OrderItemCreate],
    payment_method: Union[PaymentMethod, str],
) -> tuple[Cart, PriceBreakdown]:
    """Price ``items`` with current catalog data and the customer's current discount."""
    if not items:
        raise EmptyCartError()
    products = await load_products(db, (i.product_id for i in items))
    cart = build_cart(items, products)
    breakdown = price_cart(cart.lines, customer.discount_percent, payment_method)
    return cart, breakdown


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


async def _next_user_order_number(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.coalesce(func.max(Order.user_order_number), 0)).where(
            Order.user_id == user_id
        )
    )
    return int(result.scalar_one()) + 1


async def submit_order(
    db: AsyncSession,
    *,
    customer_id: int,
    items: Sequence[OrderItemCreate],
    payment_method: Union[PaymentMethod, str],
) -> Order:
    """Price and persist a new ``pending`` order.

    Totals are recomputed here from stored prices and the customer's stored
    discount; whatever the client previewed is ignored.
    """
    if not items:
        raise EmptyCartError()

    # Lock the customer row so their order numbers stay sequential
    customer = await get_customer(db, customer_id, for_update=True)
    cart, breakdown = await quote_order(db, customer, items, payment_method)

    order = Order(
        user_id=customer.id,
        user_order_number=await _next_user_order_number(db, customer.id),
        payment_method=breakdown.payment_method,
        total_amount=breakdown.subtotal_original,
        product_discount_amount=breakdown.product_discount_amount,
        discount_percent=breakdown.customer_discount_percent,
        customer_discount_amount=breakdown.customer_discount_amount,
        installment_fee=breakdown.installment_fee,
        final_amount=breakdown.final_payable,
        status=lifecycle.INITIAL_STATUS,
    )
    for line in breakdown.lines:
        product_type = cart.get(line.key).type
        order.items.append(
            OrderItem(
                product_id=line.product_id,
                type_id=line.type_id,
                product_name=line.product_name,
                type_name=product_type.name if product_type else None,
                type_image_url=product_type.image_url if product_type else None,
                quantity=line.quantity,
                original_price=line.original_price,
                price=line.unit_price,
                product_discount_percent=line.product_discount_percent,
                line_total=line.line_total,
            )
        )

    db.add(order)
    await db.commit()

    logger.info(
        "Created order %s for customer %s (#%d, %s, final %s)",
        order.id,
        customer.id,
        order.user_order_number,
        order.payment_method.value,
        format_amount(order.final_amount),
    )
    return await get_order(db, order.id)


# ---------------------------------------------------------------------------
# Lifecycle transitions
# ---------------------------------------------------------------------------


async def _apply_loyalty(db: AsyncSession, customer_id: int) -> tuple[int, int]:
    """Count an approved order and raise the customer's tier if it moved."""
    result = await db.execute(
        update(Customer)
        .where(Customer.id == customer_id)
        .values(orders_count=Customer.orders_count + 1)
        .returning(Customer.orders_count, Customer.discount_percent)
    )
    orders_count, current = result.one()
    discount = loyalty.discount_after_approval(orders_count, current)
    if discount != current:
        await db.execute(
            update(Customer)
            .where(Customer.id == customer_id)
            .values(discount_percent=discount)
        )
    return orders_count, discount


async def transition_order(
    db: AsyncSession, order_id: int, target: OrderStatus, *, admin_id: int
) -> Order:
    """Move a pending order to ``target``.

    The status check and the write are one conditional UPDATE, so when two
    admins race on the same order exactly one succeeds and the other gets
    ``OrderStateConflict``.
    """
    source = lifecycle.source_status_for(target)
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.status == source)
        .values(status=target, decided_at=utc_now(), decided_by=admin_id)
        .returning(Order.user_id)
    )
    user_id = result.scalar_one_or_none()

    if user_id is None:
        current = await db.scalar(select(Order.status).where(Order.id == order_id))
        if current is None:
            raise OrderNotFoundError(order_id)
        logger.warning(
            "Refused %s on order %s: already %s", target.value, order_id, current.value
        )
        lifecycle.ensure_transition(order_id, current, target)
        # Still pending, so the row changed between the UPDATE and this read
        raise OrderStateConflict(order_id, current, target)

    new_value = {"status": target.value}
    if target is OrderStatus.APPROVED:
        orders_count, discount = await _apply_loyalty(db, user_id)
        new_value.update(
            orders_count=orders_count,
            customer_discount_percent=discount,
        )

    log_audit(
        db,
        AuditEntityType.ORDER,
        order_id,
        target.value,
        admin_id,
        old_value={"status": source.value},
        new_value=new_value,
    )
    await db.commit()

    logger.info("Order %s %s by admin %s", order_id, target.value, admin_id)
    return await get_order(db, order_id)


async def approve_order(db: AsyncSession, order_id: int, *, admin_id: int) -> Order:
    return await transition_order(db, order_id, OrderStatus.APPROVED, admin_id=admin_id)


async def reject_order(db: AsyncSession, order_id: int, *, admin_id: int) -> Order:
    return await transition_order(db, order_id, OrderStatus.REJECTED, admin_id=admin_id)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def list_customer_orders(db: AsyncSession, user_id: int) -> list[Order]:
    result = await db.execute(
        _order_query()
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return list(result.scalars().all())


def _search_clause(q: str):
    clauses = [
        Customer.name.icontains(q, autoescape=True),
        Customer.phone.icontains(q, autoescape=True),
        Customer.car_brand.icontains(q, autoescape=True),
    ]
    # Only ASCII digits parse with int(); "²".isdigit() is also true
    if q.isascii() and q.isdigit() and int(q) < 2**31:
        clauses.append(Order.id == int(q))
    return or_(*clauses)


async def list_orders(db: AsyncSession, params: OrderListParams) -> tuple[list[Order], int]:
    """Filtered, paginated admin listing. Returns ``(page_items, total)``."""
    query = select(Order).join(Customer, Customer.id == Order.user_id)
    if params.status_value is not None:
        query = query.where(Order.status == params.status_value)
    if params.q:
        query = query.where(_search_clause(params.q))

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    query = (
        query.options(selectinload(Order.items), selectinload(Order.customer))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all()), total


async def count_orders_by_status(db: AsyncSession) -> dict[str, int]:
    result = await db.execute(
        select(Order.status, func.count()).group_by(Order.status)
    )
    counts = {status.value: 0 for status in OrderStatus}
    for status, count in result.all():
        counts[OrderStatus(status).value] = count
    counts["all"] = sum(counts.values())
    return counts


async def report_orders(db: AsyncSession, params: ReportParams) -> list[Order]:
    """Orders created within the report window, oldest first."""
    query = _order_query().where(
        Order.created_at >= params.start,
        Order.created_at < params.end,
    )
    if params.user_id is not None:
        query = query.where(Order.user_id == params.user_id)
    result = await db.execute(query.order_by(Order.created_at, Order.id))
    return list(result.scalars().all())
