from fastapi import APIRouter, Depends, HTTPException

from database import get_db
from models.user import SellerStats
from utils.enforcement import (
    get_late_shipment_scanner,
    get_seller_store,
    get_tier_evaluator,
)
from utils.fees import tier_policy
from utils.audit import log_audit
from utils.security import require_admin_key
from utils.tiers import InvalidSellerId
from workers.seller_enforcement_worker import run_seller_enforcement


router = APIRouter(prefix="/api/admin", tags=["Admin"])


# =====================================================
# ENFORCEMENT RUN (ON DEMAND)
# =====================================================

@router.post("/enforcement/run")
async def run_enforcement(
    admin=Depends(require_admin_key),
    db=Depends(get_db),
    scanner=Depends(get_late_shipment_scanner),
):
    report = await run_seller_enforcement(
        db,
        scanner,
        actor_id=admin["actor_id"],
        actor_role=admin["actor_role"],
    )
    return report.as_dict()


# =====================================================
# SELLER TIER
# =====================================================

@router.post("/sellers/{seller_uid}/tier/recompute")
async def recompute_seller_tier(
    seller_uid: str,
    admin=Depends(require_admin_key),
    db=Depends(get_db),
    evaluator=Depends(get_tier_evaluator),
):
    try:
        stats = await evaluator.evaluate(seller_uid)
    except InvalidSellerId as e:
        raise HTTPException(status_code=400, detail=str(e))

    if stats is None:
        raise HTTPException(status_code=404, detail="Seller not found")

    await log_audit(
        db=db,
        actor_id=admin["actor_id"],
        actor_role=admin["actor_role"],
        action="SELLER_TIER_RECOMPUTED",
        metadata={
            "seller_uid": seller_uid,
            "tier": stats.seller_tier,
        }
    )

    return {
        "seller_uid": seller_uid,
        "stats": stats.model_dump(mode="json"),
        "policy": tier_policy(stats.seller_tier),
    }


@router.get("/sellers/{seller_uid}/tier")
async def seller_tier(
    seller_uid: str,
    admin=Depends(require_admin_key),
    sellers=Depends(get_seller_store),
):
    seller = await sellers.get_seller(seller_uid)
    if not seller:
        raise HTTPException(status_code=404, detail="Seller not found")

    stats = SellerStats.from_seller(seller)

    return {
        "seller_uid": seller_uid,
        "stats": stats.model_dump(mode="json"),
        "policy": tier_policy(stats.seller_tier),
    }
