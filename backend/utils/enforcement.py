from database import get_db
from utils.late_shipments import LateShipmentScanner
from utils.stores import MongoOrderStore, MongoSellerStore
from utils.tiers import TierEvaluator

# One evaluator per process so the per-seller lock covers both the
# scheduled scan and on-demand recomputes.
_evaluator = None
_scanner = None


def get_seller_store() -> MongoSellerStore:
    return MongoSellerStore(get_db())


def get_tier_evaluator() -> TierEvaluator:
    global _evaluator

    if _evaluator is None:
        db = get_db()
        _evaluator = TierEvaluator(MongoOrderStore(db), MongoSellerStore(db))

    return _evaluator


def get_late_shipment_scanner() -> LateShipmentScanner:
    global _scanner

    if _scanner is None:
        evaluator = get_tier_evaluator()
        _scanner = LateShipmentScanner(evaluator.orders, evaluator)

    return _scanner
