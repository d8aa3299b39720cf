# backend/config/constants.py
from datetime import timedelta

# -----------------------------
# SHIPPING SLA
# -----------------------------

NO_TRACKING_SLA = timedelta(hours=48)        # open order with no tracking number
LABEL_STUCK_SLA = timedelta(hours=72)        # label bought but never scanned
ON_TIME_SHIP_WINDOW = timedelta(hours=48)    # created -> shipped

LABEL_CREATED_STATUS = "LABEL_CREATED"

# -----------------------------
# SELLER TIER SCORING
# -----------------------------

TIER_LOOKBACK = timedelta(days=60)

GOLD_MIN_ON_TIME_RATE = 0.98
GOLD_MIN_COMPLETED_ORDERS = 20

SILVER_MIN_ON_TIME_RATE = 0.90
SILVER_MAX_LATE_SHIPMENTS = 2
SILVER_MAX_DISPUTES = 2

# =========================================
# SELLER FEES (BY TIER)
# =========================================

SELLER_TIER_CONFIG = {
    "BRONZE": {
        "can_auction": False,
        "fixed_price_fee_percent": 10,
        "auction_fee_percent": None,
        "auction_fee_minimum": None,
    },
    "SILVER": {
        "can_auction": True,
        "fixed_price_fee_percent": 7,
        "auction_fee_percent": 5,
        "auction_fee_minimum": 10,
    },
    "GOLD": {
        "can_auction": True,
        "fixed_price_fee_percent": 5,
        "auction_fee_percent": 2,
        "auction_fee_minimum": 5,
    },
}
