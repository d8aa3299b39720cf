import asyncio
import logging
import weakref
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, List, NamedTuple, Optional

from config.constants import (
    GOLD_MIN_COMPLETED_ORDERS,
    GOLD_MIN_ON_TIME_RATE,
    ON_TIME_SHIP_WINDOW,
    SILVER_MAX_DISPUTES,
    SILVER_MAX_LATE_SHIPMENTS,
    SILVER_MIN_ON_TIME_RATE,
    TIER_LOOKBACK,
)
from models.order import COMPLETED_ORDER_STATES
from models.user import SellerStats, SellerTier
from utils.stores import Clock, OrderStore, SellerStore, SystemClock

logger = logging.getLogger(__name__)

# ============================================================
# TIER ENGINE — Hobbydork (Authoritative Policy Layer)
# ============================================================
# Controls:
# - Shipping / dispute stats over the lookback window
# - BRONZE / SILVER / GOLD decision
# - Persisting stats + tier on the seller record
# ============================================================


class InvalidSellerId(ValueError):
    pass


def as_utc_naive(value) -> Optional[datetime]:
    """
    Returns a naive UTC datetime, or None when the value is not a usable
    timestamp (missing, string, epoch number, ...).
    """
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============================================================
# STEP 1 — ORDER TALLY (PURE FUNCTION)
# ============================================================

@dataclass
class OrderTally:
    completed: int = 0
    on_time: int = 0
    late: int = 0
    disputes: int = 0
    chargebacks: int = 0

    @property
    def on_time_rate(self) -> float:
        # on_time also counts shipped-but-not-completed orders, so cap at 1
        if self.completed == 0:
            return 0.0
        return min(1.0, self.on_time / self.completed)


def tally_seller_orders(orders: Iterable[dict], seller_uid: str, now: datetime) -> OrderTally:
    tally = OrderTally()

    for order in orders:
        if order.get("seller_uid") != seller_uid:
            continue

        created_at = as_utc_naive(order.get("created_at"))
        if created_at is None:
            continue
        if now - created_at > TIER_LOOKBACK:
            continue

        if order.get("state") in COMPLETED_ORDER_STATES:
            tally.completed += 1

        # unshipped is neither on time nor late here
        shipped_at = as_utc_naive(order.get("shipped_at"))
        if shipped_at is not None:
            if shipped_at - created_at <= ON_TIME_SHIP_WINDOW:
                tally.on_time += 1
            else:
                tally.late += 1

        if order.get("dispute_id"):
            tally.disputes += 1

        if order.get("chargeback") is True:
            tally.chargebacks += 1

    return tally


# ============================================================
# STEP 2 — TIER RULES (FIRST MATCH WINS)
# ============================================================

class TierRule(NamedTuple):
    tier: SellerTier
    applies: Callable[[OrderTally], bool]


def _is_gold(t: OrderTally) -> bool:
    return (
        t.on_time_rate >= GOLD_MIN_ON_TIME_RATE
        and t.late == 0
        and t.disputes == 0
        and t.chargebacks == 0
        and t.completed >= GOLD_MIN_COMPLETED_ORDERS
    )


def _is_silver(t: OrderTally) -> bool:
    return (
        t.on_time_rate >= SILVER_MIN_ON_TIME_RATE
        and t.late <= SILVER_MAX_LATE_SHIPMENTS
        and t.disputes <= SILVER_MAX_DISPUTES
        and t.chargebacks == 0
    )


TIER_RULES: List[TierRule] = [
    TierRule(SellerTier.GOLD, _is_gold),
    TierRule(SellerTier.SILVER, _is_silver),
]


def determine_seller_tier(tally: OrderTally) -> SellerTier:
    for rule in TIER_RULES:
        if rule.applies(tally):
            return rule.tier
    return SellerTier.BRONZE


def compute_seller_stats(orders: Iterable[dict], seller_uid: str, now: datetime) -> SellerStats:
    tally = tally_seller_orders(orders, seller_uid, now)

    return SellerStats(
        seller_tier=determine_seller_tier(tally),
        on_time_shipping_rate=tally.on_time_rate,
        completed_orders=tally.completed,
        late_shipments_last_60d=tally.late,
        disputes_last_60d=tally.disputes,
        chargebacks_last_60d=tally.chargebacks,
        last_tier_change=now,
    )


# ============================================================
# STEP 3 — EVALUATOR (READ, SCORE, PERSIST)
# ============================================================

class TierEvaluator:
    """
    Recomputes a seller's stats and tier from their recent orders.

    Runs for the same seller are serialized; different sellers run freely.
    Store errors propagate to the caller.
    """

    def __init__(
        self,
        orders: OrderStore,
        sellers: SellerStore,
        clock: Optional[Clock] = None,
    ):
        self.orders = orders
        self.sellers = sellers
        self.clock = clock or SystemClock()
        # Entries vanish once no run holds or waits on the seller's lock.
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    async def evaluate(self, seller_uid: str) -> Optional[SellerStats]:
        if not isinstance(seller_uid, str) or not seller_uid.strip():
            raise InvalidSellerId(f"Invalid seller id: {seller_uid!r}")

        lock = self._locks.get(seller_uid)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[seller_uid] = lock

        async with lock:
            return await self._evaluate(seller_uid)

    async def _evaluate(self, seller_uid: str) -> Optional[SellerStats]:
        seller = await self.sellers.get_seller(seller_uid)
        if seller is None:
            logger.debug("TIER_EVALUATION_SKIPPED seller=%s not found", seller_uid)
            return None

        now = self.clock.now()

        # Full scan; list_orders is the seam for an indexed query.
        orders = await self.orders.list_orders(None)
        stats = compute_seller_stats(orders, seller_uid, now)

        await self.sellers.update_seller(seller_uid, stats.model_dump())

        if seller.get("seller_tier") != stats.seller_tier:
            logger.info(
                "SELLER_TIER_CHANGED seller=%s old=%s new=%s",
                seller_uid,
                seller.get("seller_tier"),
                stats.seller_tier,
            )

        return stats
