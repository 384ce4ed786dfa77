"""Async HTTP client for the shop API.

Used by storefront/admin front-ends and scripts. Holds the session token and
nothing else: the cart is a local :class:`~services.shop_service.cart.Cart`
owned by the caller, priced for display with :meth:`ShopClient.preview`.

Errors are never retried here. Every failed call raises one of:

- :class:`ValidationError`: refused locally, no request was sent;
- :class:`AuthorizationError`: 401/403;
- :class:`ConflictError`: 409, e.g. approving an order that is not pending;
- :class:`ApiError`: anything else, including transport failures.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Union

import httpx
from libs.auth.dependencies import unverified_claims
from libs.common.config import get_settings
from libs.common.logging import get_logger, get_request_id
from services.shop_service.cart import Cart, ProductSnapshot
from services.shop_service.models.enums import OrderStatusFilter, PaymentMethod
from services.shop_service.pricing import PriceBreakdown, price_cart
from services.shop_service.schemas import (
    AdminOrderResponse,
    AdminProductResponse,
    MeResponse,
    OrderCountsResponse,
    OrderListResponse,
    OrderResponse,
    ProductTypeResponse,
    QuoteResponse,
    ReportResponse,
)

logger = get_logger(__name__)


class ShopClientError(Exception):
    """Base for every error raised by :class:`ShopClient`."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ValidationError(ShopClientError):
    pass


class ApiError(ShopClientError):
    pass


class AuthorizationError(ApiError):
    pass


class ConflictError(ApiError):
    pass


def error_message(response: httpx.Response) -> str:
    """The server's ``detail`` if it sent one, else ``"HTTP <status>"``."""
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, str) and detail:
        return detail
    if isinstance(detail, list) and detail:
        # FastAPI request validation errors
        return "; ".join(
            str(d.get("msg", d)) if isinstance(d, dict) else str(d) for d in detail
        )
    return f"HTTP {response.status_code}"


def raise_for_response(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = error_message(response)
    status = response.status_code
    if status in (401, 403):
        raise AuthorizationError(message, status)
    if status == 409:
        raise ConflictError(message, status)
    raise ApiError(message, status)


def parse_int_field(
    value: Any, field: str, *, minimum: int = 0, maximum: Optional[int] = None
) -> int:
    """Parse form input such as ``"12 500"`` into an int, or raise ValidationError."""
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, str):
        value = value.replace(" ", "").strip()
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if number < minimum or (maximum is not None and number > maximum):
        upper = f" and {maximum}" if maximum is not None else ""
        raise ValidationError(f"{field} must be between {minimum}{upper}")
    return number


def is_admin_from_token(token: Optional[str]) -> bool:
    """Read the ``is_admin`` claim without verifying the token.

    Only for deciding which screens to show. The server re-checks admin
    rights on every admin call.
    """
    if not token:
        return False
    claims = unverified_claims(token)
    return bool(claims and claims.get("is_admin"))


class ShopClient:
    """Thin async wrapper over the shop HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.token = token
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.API_URL,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "ShopClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_admin(self) -> bool:
        return is_admin_from_token(self.token)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        try:
            response = await self._http.request(
                method, path, json=json, params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Network error: {exc}") from exc

        raise_for_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Customer
    # ------------------------------------------------------------------

    async def get_products(self) -> list[ProductSnapshot]:
        data = await self._request("GET", "/products")
        return [ProductSnapshot.from_dict(p) for p in data]

    async def get_me(self) -> MeResponse:
        return MeResponse.model_validate(await self._request("GET", "/me"))

    async def get_my_orders(self) -> list[OrderResponse]:
        data = await self._request("GET", "/orders")
        return [OrderResponse.model_validate(o) for o in data]

    async def get_my_order(self, order_id: int) -> OrderResponse:
        return OrderResponse.model_validate(
            await self._request("GET", f"/orders/{order_id}")
        )

    def preview(
        self,
        cart: Cart,
        me: Union[MeResponse, Mapping[str, Any], None],
        payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH,
    ) -> PriceBreakdown:
        """Price the cart locally for display.

        Advisory only: uses the prices captured when items were added and
        whatever discount ``me`` carries. The server reprices on submit.
        """
        if me is None:
            discount = 0
        elif isinstance(me, Mapping):
            discount = me.get("discount_percent", me.get("discount")) or 0
        else:
            discount = me.discount_percent
        return price_cart(cart.lines, discount, payment_method)

    async def quote(
        self, cart: Cart, payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH
    ) -> QuoteResponse:
        """Server-side price of the cart with current prices; nothing is saved."""
        if cart.is_empty:
            raise ValidationError("Cart is empty")
        data = await self._request(
            "POST",
            "/orders/quote",
            json={
                "items": cart.to_order_items(),
                "payment_method": PaymentMethod(payment_method).value,
            },
        )
        return QuoteResponse.model_validate(data)

    async def create_order(
        self, cart: Cart, payment_method: Union[PaymentMethod, str] = PaymentMethod.CASH
    ) -> OrderResponse:
        """Submit the cart. The cart is cleared only once the order exists."""
        if cart.is_empty:
            raise ValidationError("Cart is empty")
        data = await self._request(
            "POST",
            "/orders",
            json={
                "items": cart.to_order_items(),
                "payment_method": PaymentMethod(payment_method).value,
            },
        )
        order = OrderResponse.model_validate(data)
        cart.clear()
        logger.info("Submitted order %s (final=%d)", order.id, order.final_amount)
        return order

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def admin_get_orders(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        q: Optional[str] = None,
        status: Union[OrderStatusFilter, str] = OrderStatusFilter.ALL,
    ) -> OrderListResponse:
        params: dict[str, Any] = {
            "page": page,
            "limit": limit,
            "status": OrderStatusFilter(status).value,
        }
        if q and q.strip():
            params["q"] = q.strip()
        data = await self._request("GET", "/admin/orders", params=params)
        return OrderListResponse.model_validate(data)

    async def admin_get_orders_count(self) -> OrderCountsResponse:
        return OrderCountsResponse.model_validate(
            await self._request("GET", "/admin/orders/count")
        )

    async def admin_get_order(self, order_id: int) -> AdminOrderResponse:
        return AdminOrderResponse.model_validate(
            await self._request("GET", f"/admin/orders/{order_id}")
        )

    async def admin_approve_order(self, order_id: int) -> AdminOrderResponse:
        return AdminOrderResponse.model_validate(
            await self._request("PATCH", f"/admin/orders/{order_id}/approve")
        )

    async def admin_reject_order(self, order_id: int) -> AdminOrderResponse:
        return AdminOrderResponse.model_validate(
            await self._request("PATCH", f"/admin/orders/{order_id}/reject")
        )

    async def admin_add_product(
        self,
        name: str,
        price: Any,
        discount_percent: Any = 0,
        active: bool = True,
    ) -> AdminProductResponse:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Product name is required")
        payload = {
            "name": name,
            "price": parse_int_field(price, "Price"),
            "discount_percent": parse_int_field(
                discount_percent, "Discount", maximum=100
            ),
            "active": active,
        }
        data = await self._request("POST", "/admin/products", json=payload)
        return AdminProductResponse.model_validate(data)

    async def admin_update_product(
        self, product_id: int, **changes: Any
    ) -> AdminProductResponse:
        """Partial update; only ``name``, ``price``, ``discount_percent``, ``active``."""
        payload: dict[str, Any] = {}
        for field, value in changes.items():
            if field == "price":
                payload["price"] = parse_int_field(value, "Price")
            elif field == "discount_percent":
                payload["discount_percent"] = parse_int_field(
                    value, "Discount", maximum=100
                )
            elif field == "name":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("Product name is required")
                payload["name"] = value
            elif field == "active":
                payload["active"] = bool(value)
            else:
                raise ValidationError(f"Unknown product field: {field}")
        if not payload:
            raise ValidationError("Nothing to update")
        data = await self._request(
            "PATCH", f"/admin/products/{product_id}", json=payload
        )
        return AdminProductResponse.model_validate(data)

    async def admin_get_products(self) -> list[AdminProductResponse]:
        data = await self._request("GET", "/admin/products")
        return [AdminProductResponse.model_validate(p) for p in data]

    async def admin_add_product_type(
        self, product_id: int, name: str, image_url: str = ""
    ) -> ProductTypeResponse:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Type name is required")
        data = await self._request(
            "POST",
            f"/admin/products/{product_id}/types",
            json={"name": name, "image_url": (image_url or "").strip()},
        )
        return ProductTypeResponse.model_validate(data)

    async def admin_delete_product_type(self, type_id: int) -> None:
        await self._request("DELETE", f"/admin/product-types/{type_id}")

    async def admin_set_discount(self, user_id: int, discount_percent: Any) -> MeResponse:
        payload = {
            "discount_percent": parse_int_field(discount_percent, "Discount", maximum=100)
        }
        data = await self._request(
            "PATCH", f"/admin/users/{user_id}/discount", json=payload
        )
        return MeResponse.model_validate(data)

    async def admin_report(
        self, date_from: date, date_to: date, user_id: Optional[int] = None
    ) -> ReportResponse:
        """Orders report for the inclusive window, optionally for one customer."""
        if date_from > date_to:
            raise ValidationError("date_from must not be after date_to")
        path = "/admin/reports/orders"
        if user_id is not None:
            path = f"/admin/reports/client/{user_id}"
        data = await self._request(
            "GET",
            path,
            params={"date_from": date_from.isoformat(), "date_to": date_to.isoformat()},
        )
        return ReportResponse.model_validate(data)
