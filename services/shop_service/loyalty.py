"""Loyalty tier policy.

A customer's discount grows with the number of *approved* orders. Tiers are
configured as ``"orders_count:discount_percent"`` pairs in
``LOYALTY_TIERS``; the highest threshold reached wins.
"""

from functools import lru_cache

from libs.common.config import get_settings

Tier = tuple[int, int]


def parse_tiers(raw: str) -> tuple[Tier, ...]:
    """Parse ``"0:0,5:3,10:5"`` into ``((0, 0), (5, 3), (10, 5))``."""
    tiers: list[Tier] = []
    for chunk in raw.split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        threshold, _, percent = chunk.partition(":")
        try:
            tier = (int(threshold), int(percent))
        except ValueError:
            raise ValueError(f"Bad loyalty tier {chunk!r}, expected 'count:percent'")
        if tier[0] < 0 or not 0 <= tier[1] <= 100:
            raise ValueError(f"Loyalty tier out of range: {chunk!r}")
        tiers.append(tier)
    return tuple(sorted(tiers))


@lru_cache
def configured_tiers() -> tuple[Tier, ...]:
    return parse_tiers(get_settings().LOYALTY_TIERS)


def discount_for_orders_count(orders_count: int, tiers: tuple[Tier, ...] = ()) -> int:
    tiers = tiers or configured_tiers()
    discount = 0
    for threshold, percent in tiers:
        if orders_count >= threshold:
            discount = percent
    return discount


def discount_after_approval(
    orders_count: int, current_discount: int, tiers: tuple[Tier, ...] = ()
) -> int:
    """Discount to store once an approval brings the count to ``orders_count``.

    An admin-set discount above the earned tier is kept.
    """
    return max(current_discount, discount_for_orders_count(orders_count, tiers))
