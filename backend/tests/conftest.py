import asyncio
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

NOW = datetime(2026, 3, 1, 12, 0, 0)


def hours_ago(hours: float) -> datetime:
    return NOW - timedelta(hours=hours)


def make_order(order_id, seller_uid="seller-1", **fields):
    order = {
        "_id": order_id,
        "seller_uid": seller_uid,
        "buyer_uid": "buyer-1",
        "state": "PAID",
        "created_at": hours_ago(1),
    }
    order.update(fields)
    return order


def _matches(doc, filter):
    for key, cond in (filter or {}).items():
        if isinstance(cond, dict) and "$in" in cond:
            if doc.get(key) not in cond["$in"]:
                return False
        elif doc.get(key) != cond:
            return False
    return True


class FrozenClock:
    def __init__(self, now=NOW):
        self.current = now

    def now(self):
        return self.current


class FakeOrderStore:
    def __init__(self, orders=(), events=None, fail_updates=()):
        self.orders = {o["_id"]: dict(o) for o in orders}
        self.events = events if events is not None else []
        self.fail_updates = set(fail_updates)
        self.filters = []
        self.patches = []

    async def list_orders(self, filter=None):
        self.filters.append(filter)
        return [dict(o) for o in self.orders.values() if _matches(o, filter)]

    async def update_order(self, order_id, patch):
        await asyncio.sleep(0)
        if order_id in self.fail_updates:
            raise ConnectionError(f"write failed for {order_id}")
        self.patches.append((order_id, dict(patch)))
        self.events.append(("update_order", order_id))
        self.orders[order_id].update(patch)


class FakeSellerStore:
    def __init__(self, sellers=()):
        self.sellers = {uid: {"_id": uid} for uid in sellers}
        self.writes = []

    async def get_seller(self, uid):
        seller = self.sellers.get(uid)
        return dict(seller) if seller is not None else None

    async def update_seller(self, uid, patch):
        self.writes.append((uid, dict(patch)))
        self.sellers[uid].update(patch)


class RecordingEvaluator:
    def __init__(self, events=None, fail_for=()):
        self.events = events if events is not None else []
        self.fail_for = set(fail_for)
        self.calls = []

    async def evaluate(self, seller_uid):
        await asyncio.sleep(0)
        self.calls.append(seller_uid)
        self.events.append(("evaluate", seller_uid))
        if seller_uid in self.fail_for:
            raise TimeoutError(f"seller store timed out for {seller_uid}")


class FakeAuditCollection:
    def __init__(self):
        self.docs = []

    async def insert_one(self, doc):
        self.docs.append(doc)

    async def delete_many(self, filter):
        cutoff = filter["created_at"]["$lt"]
        kept = [d for d in self.docs if d["created_at"] >= cutoff]
        deleted = len(self.docs) - len(kept)
        self.docs = kept
        return SimpleNamespace(deleted_count=deleted)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def fake_db():
    return SimpleNamespace(audit_logs=FakeAuditCollection())
