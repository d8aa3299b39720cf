from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum


class SellerTier(str, Enum):
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"


class SellerStats(BaseModel):
    """
    Shipping / dispute stats persisted on the seller's user record.
    Recomputed wholesale by the tier evaluator; never merged.
    """

    model_config = ConfigDict(use_enum_values=True)

    seller_tier: SellerTier = SellerTier.BRONZE
    on_time_shipping_rate: float = Field(0.0, ge=0.0, le=1.0)
    completed_orders: int = 0
    late_shipments_last_60d: int = 0
    disputes_last_60d: int = 0
    chargebacks_last_60d: int = 0
    last_tier_change: datetime | None = None

    @classmethod
    def from_seller(cls, seller: dict) -> "SellerStats":
        """
        Lenient read of a stored record. Unknown tiers read as BRONZE and
        uncapped legacy rates are clamped into [0, 1].
        """
        fields = {
            name: seller[name]
            for name in cls.model_fields
            if seller.get(name) is not None
        }

        if "seller_tier" in fields:
            try:
                fields["seller_tier"] = SellerTier(fields["seller_tier"])
            except ValueError:
                fields["seller_tier"] = SellerTier.BRONZE

        rate = fields.get("on_time_shipping_rate")
        if isinstance(rate, (int, float)):
            fields["on_time_shipping_rate"] = min(1.0, max(0.0, float(rate)))

        return cls(**fields)
