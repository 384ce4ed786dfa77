"""Order pricing and discount engine.

This is the only implementation of the pricing rules. The order service runs
it authoritatively when an order is submitted; the quote endpoint and the
API client's live preview run the very same function, so a preview can only
differ from the stored order when its inputs (prices, customer discount) are
stale.

Order of application is fixed policy:

1. product discount per unit, on the product's list price;
2. customer loyalty discount, on the product-discounted subtotal;
3. installment surcharge, on the fully discounted amount.

Changing that order would change the totals of every order already issued.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from libs.common.money import apply_percent, percent_of
from services.shop_service.cart import CartLine
from services.shop_service.models.enums import PaymentMethod

INSTALLMENT_FEE_PERCENT = 15


@dataclass(frozen=True)
class LinePrice:
    key: str
    product_id: int
    product_name: str
    type_id: Optional[int]
    quantity: int
    original_price: int
    unit_price: int
    product_discount_percent: int
    original_total: int
    line_total: int


@dataclass(frozen=True)
class PriceBreakdown:
    payment_method: PaymentMethod
    subtotal_original: int
    subtotal_after_product_discount: int
    product_discount_amount: int
    customer_discount_percent: int
    customer_discount_amount: int
    final_before_surcharge: int
    installment_fee: int
    final_payable: int
    lines: tuple[LinePrice, ...] = ()

    def as_dict(self) -> dict:
        return {
            "payment_method": self.payment_method.value,
            "subtotal_original": self.subtotal_original,
            "subtotal_after_product_discount": self.subtotal_after_product_discount,
            "product_discount_amount": self.product_discount_amount,
            "customer_discount_percent": self.customer_discount_percent,
            "customer_discount_amount": self.customer_discount_amount,
            "final_before_surcharge": self.final_before_surcharge,
            "installment_fee": self.installment_fee,
            "final_payable": self.final_payable,
        }


def price_line(line: CartLine) -> LinePrice:
    product = line.product
    if product.price < 0:
        raise ValueError(f"Product {product.id} has a negative price")
    if line.quantity < 1:
        raise ValueError(f"Line {line.key} has quantity {line.quantity}")

    unit = apply_percent(product.price, product.discount_percent)
    return LinePrice(
        key=line.key,
        product_id=product.id,
        product_name=product.name,
        type_id=line.type_id,
        quantity=line.quantity,
        original_price=product.price,
        unit_price=unit,
        product_discount_percent=product.discount_percent,
        original_total=product.price * line.quantity,
        line_total=unit * line.quantity,
    )


def installment_fee(amount: int, payment_method: PaymentMethod) -> int:
    if payment_method is PaymentMethod.INSTALLMENT:
        return percent_of(amount, INSTALLMENT_FEE_PERCENT)
    return 0


def price_cart(
    lines: Iterable[CartLine],
    customer_discount_percent: int,
    payment_method: Union[PaymentMethod, str],
) -> PriceBreakdown:
    """Price ``lines`` for a customer with the given loyalty discount.

    An empty ``lines`` prices to all zeros; rejecting empty orders is the
    caller's job.
    """
    method = PaymentMethod(payment_method)
    priced = tuple(price_line(line) for line in lines)

    subtotal_original = sum(p.original_total for p in priced)
    subtotal_after_product = sum(p.line_total for p in priced)
    final_before_surcharge = apply_percent(
        subtotal_after_product, customer_discount_percent
    )
    fee = installment_fee(final_before_surcharge, method)

    return PriceBreakdown(
        payment_method=method,
        subtotal_original=subtotal_original,
        subtotal_after_product_discount=subtotal_after_product,
        product_discount_amount=subtotal_original - subtotal_after_product,
        customer_discount_percent=int(customer_discount_percent),
        customer_discount_amount=subtotal_after_product - final_before_surcharge,
        final_before_surcharge=final_before_surcharge,
        installment_fee=fee,
        final_payable=final_before_surcharge + fee,
        lines=priced,
    )
