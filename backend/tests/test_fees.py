from decimal import Decimal

import pytest

from models.user import SellerTier
from utils.fees import (
    AuctionNotAllowed,
    auction_upfront_fee,
    can_create_auction,
    fixed_price_fee,
    tier_policy,
)


@pytest.mark.parametrize(
    "tier, allowed",
    [("BRONZE", False), ("SILVER", True), ("GOLD", True), (None, False), ("standard", False)],
)
def test_only_silver_and_gold_can_auction(tier, allowed):
    assert can_create_auction(tier) is allowed


@pytest.mark.parametrize(
    "tier, price, fee",
    [
        ("BRONZE", 100, Decimal("10.00")),
        ("SILVER", 100, Decimal("7.00")),
        (SellerTier.GOLD, 100, Decimal("5.00")),
        ("BRONZE", "19.99", Decimal("2.00")),
        ("SILVER", "0.07", Decimal("0.00")),
    ],
)
def test_fixed_price_fee(tier, price, fee):
    assert fixed_price_fee(tier, price) == fee


def test_silver_auction_fee_has_ten_dollar_minimum():
    assert auction_upfront_fee("SILVER", 50) == Decimal("10.00")
    assert auction_upfront_fee("SILVER", 1000) == Decimal("50.00")


def test_gold_auction_fee_has_five_dollar_minimum():
    assert auction_upfront_fee("GOLD", 100) == Decimal("5.00")
    assert auction_upfront_fee("GOLD", "333.33") == Decimal("6.67")


def test_bronze_cannot_pay_for_an_auction():
    with pytest.raises(AuctionNotAllowed):
        auction_upfront_fee("BRONZE", 100)


def test_negative_price_rejected():
    with pytest.raises(ValueError):
        fixed_price_fee("GOLD", -1)


def test_unknown_tier_gets_bronze_policy():
    assert tier_policy("platinum")["tier"] == "BRONZE"
