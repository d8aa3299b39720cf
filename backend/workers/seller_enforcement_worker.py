import asyncio
import logging

from config.env import ENFORCEMENT_INTERVAL_HOURS
from database import get_db
from utils.audit import log_audit
from utils.enforcement import get_late_shipment_scanner
from utils.late_shipments import LateShipmentScanner

CHECK_INTERVAL_SECONDS = int(ENFORCEMENT_INTERVAL_HOURS * 60 * 60)  # daily by default
logger = logging.getLogger(__name__)


async def run_seller_enforcement(db, scanner: LateShipmentScanner, actor_id: str = "system", actor_role: str = "system"):
    """
    One enforcement pass: flag late orders, rescore their sellers,
    leave an audit trail of what happened.
    """
    report = await scanner.run()

    await log_audit(
        db=db,
        actor_id=actor_id,
        actor_role=actor_role,
        action="SELLER_ENFORCEMENT_RUN",
        metadata=report.as_dict(),
    )

    if not report.ok:
        logger.warning(
            "SELLER_ENFORCEMENT_PARTIAL failed_orders=%s failed_sellers=%s",
            len(report.failed_orders),
            len(report.failed_sellers),
        )

    return report


async def seller_enforcement_worker():
    db = get_db()
    scanner = get_late_shipment_scanner()

    while True:
        try:
            await run_seller_enforcement(db, scanner)
        except Exception:
            # whole run failed; the next tick is the retry
            logger.exception("SELLER_ENFORCEMENT_ERROR")

        await asyncio.sleep(CHECK_INTERVAL_SECONDS)
