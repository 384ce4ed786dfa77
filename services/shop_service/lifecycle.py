"""Order lifecycle: ``pending -> approved | rejected``.

Both target states are terminal. Transitions are deliberately not idempotent:
approving an already approved order is an error, because approval is what
bumps the customer's ``orders_count`` and doing it twice would inflate their
loyalty tier.

This module only answers "is this move legal"; the order service applies the
move with a conditional UPDATE so that concurrent admins cannot both win.
"""

from services.shop_service.exceptions import OrderStateConflict
from services.shop_service.models.enums import OrderStatus

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.APPROVED, OrderStatus.REJECTED}),
    OrderStatus.APPROVED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
}

INITIAL_STATUS = OrderStatus.PENDING


def is_terminal(status: OrderStatus) -> bool:
    return not TRANSITIONS[status]


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[current]


def source_status_for(target: OrderStatus) -> OrderStatus:
    """The single status an order must be in to move to ``target``."""
    sources = [s for s, targets in TRANSITIONS.items() if target in targets]
    if len(sources) != 1:
        raise ValueError(f"No unique source status for {target.value}")
    return sources[0]


def ensure_transition(order_id: int, current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise OrderStateConflict(order_id, current, target)
