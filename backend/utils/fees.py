from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from config.constants import SELLER_TIER_CONFIG
from models.user import SellerTier

CENTS = Decimal("0.01")


class AuctionNotAllowed(PermissionError):
    pass


def normalize_tier(tier) -> SellerTier:
    """
    Anything that is not a known tier (None, legacy values) is BRONZE.
    """
    try:
        return SellerTier(tier)
    except ValueError:
        return SellerTier.BRONZE


def tier_policy(tier) -> Dict[str, Any]:
    tier = normalize_tier(tier)
    return {"tier": tier.value, **SELLER_TIER_CONFIG[tier.value]}


def can_create_auction(tier) -> bool:
    return tier_policy(tier)["can_auction"]


def _percent_of(amount, percent) -> Decimal:
    amount = Decimal(str(amount))
    if amount < 0:
        raise ValueError("Amount cannot be negative")
    return (amount * Decimal(percent) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def fixed_price_fee(tier, sale_price) -> Decimal:
    policy = tier_policy(tier)
    return _percent_of(sale_price, policy["fixed_price_fee_percent"])


def auction_upfront_fee(tier, starting_price) -> Decimal:
    """
    Auction fees are charged once, upfront, on the starting price.
    No final value fee is taken when the auction closes.
    """
    policy = tier_policy(tier)

    if not policy["can_auction"]:
        raise AuctionNotAllowed(f"{policy['tier']} sellers cannot create auctions")

    fee = _percent_of(starting_price, policy["auction_fee_percent"])
    return max(fee, Decimal(policy["auction_fee_minimum"]).quantize(CENTS))
