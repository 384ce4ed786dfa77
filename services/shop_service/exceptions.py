"""Shop domain errors."""

from libs.common.errors import Conflict, NotFound, ValidationFailed
from services.shop_service.models.enums import OrderStatus


class EmptyCartError(ValidationFailed):
    default_detail = "Cart is empty"


class InvalidOrderItemError(ValidationFailed):
    default_detail = "Invalid order item"


class OrderNotFoundError(NotFound):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class OrderStateConflict(Conflict):
    """Approve/reject attempted on an order that is no longer pending."""

    def __init__(self, order_id: int, current: OrderStatus, target: OrderStatus):
        self.order_id = order_id
        self.current = current
        self.target = target
        super().__init__(
            f"Order {order_id} is already {current.value}, cannot mark it {target.value}"
        )
