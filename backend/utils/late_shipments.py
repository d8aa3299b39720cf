import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.constants import LABEL_CREATED_STATUS, LABEL_STUCK_SLA, NO_TRACKING_SLA
from models.order import OPEN_ORDER_STATES
from utils.stores import Clock, OrderStore, SystemClock
from utils.tiers import TierEvaluator, as_utc_naive

logger = logging.getLogger(__name__)

NO_TRACKING = "NO_TRACKING"
LABEL_STUCK = "LABEL_STUCK"


def late_shipment_breaches(order: dict, now: datetime) -> List[str]:
    """
    SLA rules broken by an open order. Both rules may fire at once.
    Orders without a usable created_at are never late.
    """
    created_at = as_utc_naive(order.get("created_at"))
    if created_at is None:
        return []

    age = now - created_at
    breaches = []

    if age > NO_TRACKING_SLA and not order.get("tracking_number"):
        breaches.append(NO_TRACKING)

    if age > LABEL_STUCK_SLA and order.get("tracking_status") == LABEL_CREATED_STATUS:
        breaches.append(LABEL_STUCK)

    return breaches


@dataclass
class ScanReport:
    started_at: datetime
    scanned: int = 0
    flagged_orders: List[Any] = field(default_factory=list)
    failed_orders: List[Any] = field(default_factory=list)
    sellers: List[str] = field(default_factory=list)
    rescored_sellers: List[str] = field(default_factory=list)
    failed_sellers: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_orders and not self.failed_sellers

    def as_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "ok": self.ok,
            "scanned": self.scanned,
            "flagged_orders": [str(i) for i in self.flagged_orders],
            "failed_orders": [str(i) for i in self.failed_orders],
            "sellers": self.sellers,
            "rescored_sellers": self.rescored_sellers,
            "failed_sellers": self.failed_sellers,
        }


class LateShipmentScanner:
    """
    Flags open orders that broke the shipping SLA, then rescores each
    affected seller once.

    Every order update and every seller rescore is best effort: one failure
    is logged and the rest of the run carries on. The next scheduled run is
    the retry. The `late` flag is only ever set, never cleared.
    """

    def __init__(
        self,
        orders: OrderStore,
        evaluator: TierEvaluator,
        clock: Optional[Clock] = None,
    ):
        self.orders = orders
        self.evaluator = evaluator
        self.clock = clock or SystemClock()

    async def run(self) -> ScanReport:
        now = self.clock.now()
        report = ScanReport(started_at=now)

        open_orders = await self.orders.list_orders({
            "state": {"$in": OPEN_ORDER_STATES}
        })
        report.scanned = len(open_orders)

        breaching = []
        for order in open_orders:
            if order.get("state") not in OPEN_ORDER_STATES:
                continue
            breaches = late_shipment_breaches(order, now)
            if breaches:
                breaching.append((order, breaches))

        # All order writes land before any seller is rescored.
        flagged = await asyncio.gather(*(
            self._flag_late(order, breaches, report)
            for order, breaches in breaching
        ))

        worklist: Dict[str, None] = {}
        for order in flagged:
            if order is None:
                continue
            seller_uid = order.get("seller_uid")
            if not isinstance(seller_uid, str) or not seller_uid.strip():
                logger.warning("LATE_ORDER_WITHOUT_SELLER order=%s", order.get("_id"))
                continue
            worklist.setdefault(seller_uid, None)

        report.sellers = list(worklist)

        await asyncio.gather(*(
            self._rescore(seller_uid, report)
            for seller_uid in report.sellers
        ))

        logger.info(
            "LATE_SHIPMENT_SCAN scanned=%s flagged=%s sellers=%s failed_orders=%s failed_sellers=%s",
            report.scanned,
            len(report.flagged_orders),
            len(report.sellers),
            len(report.failed_orders),
            len(report.failed_sellers),
        )

        return report

    async def _flag_late(self, order: dict, breaches: List[str], report: ScanReport) -> Optional[dict]:
        order_id = order.get("_id")
        try:
            await self.orders.update_order(order_id, {"late": True})
        except Exception:
            logger.exception("LATE_SHIPMENT_UPDATE_ERROR order=%s", order_id)
            report.failed_orders.append(order_id)
            return None

        logger.debug("ORDER_MARKED_LATE order=%s breaches=%s", order_id, ",".join(breaches))
        report.flagged_orders.append(order_id)
        return order

    async def _rescore(self, seller_uid: str, report: ScanReport) -> None:
        try:
            await self.evaluator.evaluate(seller_uid)
        except Exception:
            logger.exception("TIER_EVALUATION_ERROR seller=%s", seller_uid)
            report.failed_sellers.append(seller_uid)
            return

        report.rescored_sellers.append(seller_uid)
