"""Unit tests for loyalty tier policy."""

import pytest
from services.shop_service import loyalty

TIERS = ((0, 0), (5, 3), (10, 5), (20, 7), (30, 10))


@pytest.mark.unit
def test_parse_tiers_sorts_and_strips():
    assert loyalty.parse_tiers(" 10:5, 0:0 ,5:3,") == ((0, 0), (5, 3), (10, 5))


@pytest.mark.unit
@pytest.mark.parametrize("raw", ["5-3", "a:b", "5:101", "-1:3"])
def test_parse_tiers_rejects_bad_input(raw):
    with pytest.raises(ValueError):
        loyalty.parse_tiers(raw)


@pytest.mark.unit
@pytest.mark.parametrize(
    "count, expected",
    [(0, 0), (4, 0), (5, 3), (9, 3), (10, 5), (25, 7), (30, 10), (300, 10)],
)
def test_discount_for_orders_count(count, expected):
    assert loyalty.discount_for_orders_count(count, TIERS) == expected


@pytest.mark.unit
def test_default_tiers_come_from_settings():
    assert loyalty.configured_tiers() == TIERS
    assert loyalty.discount_for_orders_count(10) == 5


@pytest.mark.unit
def test_approval_never_lowers_an_admin_override():
    assert loyalty.discount_after_approval(5, 0, TIERS) == 3
    assert loyalty.discount_after_approval(5, 15, TIERS) == 15
    assert loyalty.discount_after_approval(10, 3, TIERS) == 5
