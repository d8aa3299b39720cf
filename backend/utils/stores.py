from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol

# ============================================================
# STORE COLLABORATORS
# ============================================================
# The enforcement core never reaches for get_db() itself.
# Stores are handed in at construction so tests can swap in fakes
# and an indexed order query can replace the full scan later.
# ============================================================


class OrderStore(Protocol):
    async def list_orders(self, filter: Optional[Dict[str, Any]] = None) -> List[dict]:
        ...

    async def update_order(self, order_id, patch: Dict[str, Any]) -> None:
        ...


class SellerStore(Protocol):
    async def get_seller(self, uid: str) -> Optional[dict]:
        ...

    async def update_seller(self, uid: str, patch: Dict[str, Any]) -> None:
        ...


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.utcnow()


# ============================================================
# MONGO (MOTOR) IMPLEMENTATIONS
# ============================================================

class MongoOrderStore:
    def __init__(self, db):
        self.collection = db.orders

    async def list_orders(self, filter: Optional[Dict[str, Any]] = None) -> List[dict]:
        return await self.collection.find(filter or {}).to_list(None)

    async def update_order(self, order_id, patch: Dict[str, Any]) -> None:
        await self.collection.update_one(
            {"_id": order_id},
            {"$set": patch}
        )


class MongoSellerStore:
    def __init__(self, db):
        self.collection = db.users

    async def get_seller(self, uid: str) -> Optional[dict]:
        return await self.collection.find_one({"_id": uid})

    async def update_seller(self, uid: str, patch: Dict[str, Any]) -> None:
        await self.collection.update_one(
            {"_id": uid},
            {"$set": patch}
        )
