import asyncio
import logging

from config.env import AUDIT_RETENTION_DAYS
from database import get_db
from utils.audit import prune_audit_logs

CHECK_INTERVAL_SECONDS = 60 * 60  # hourly
logger = logging.getLogger(__name__)


async def audit_cleanup_worker():
    db = get_db()

    while True:
        try:
            deleted = await prune_audit_logs(db, AUDIT_RETENTION_DAYS)
            if deleted:
                logger.info("AUDIT_LOGS_PRUNED deleted=%s", deleted)
        except Exception:
            logger.exception("AUDIT_CLEANUP_ERROR")

        await asyncio.sleep(CHECK_INTERVAL_SECONDS)
