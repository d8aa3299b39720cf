from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from conftest import NOW, FakeOrderStore, FakeSellerStore, FrozenClock, hours_ago, make_order
from database import get_db
from main import app
from utils import security
from utils.enforcement import get_late_shipment_scanner, get_seller_store, get_tier_evaluator
from utils.late_shipments import LateShipmentScanner
from utils.tiers import TierEvaluator

ADMIN_KEY = "test-admin-key"


@pytest.fixture
def stores():
    created = NOW - timedelta(days=2)
    orders = FakeOrderStore([
        make_order(f"done-{i}", state="DELIVERED", created_at=created,
                   shipped_at=created + timedelta(hours=6), tracking_number=f"T{i}")
        for i in range(20)
    ] + [make_order("overdue", seller_uid="seller-2", created_at=hours_ago(60))])
    sellers = FakeSellerStore(["seller-1", "seller-2"])
    return orders, sellers


@pytest.fixture
def client(monkeypatch, stores, fake_db):
    monkeypatch.setattr(security, "ADMIN_API_KEY", ADMIN_KEY)

    orders, sellers = stores
    clock = FrozenClock()
    evaluator = TierEvaluator(orders, sellers, clock)
    scanner = LateShipmentScanner(orders, evaluator, clock)

    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_tier_evaluator] = lambda: evaluator
    app.dependency_overrides[get_late_shipment_scanner] = lambda: scanner
    app.dependency_overrides[get_seller_store] = lambda: sellers

    yield TestClient(app)

    app.dependency_overrides.clear()


def admin_headers():
    return {"X-Admin-Key": ADMIN_KEY}


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_admin_routes_require_key(client):
    assert client.post("/api/admin/enforcement/run").status_code == 401

    response = client.post(
        "/api/admin/enforcement/run",
        headers={"X-Admin-Key": "wrong"},
    )
    assert response.status_code == 401


def test_unconfigured_admin_key_is_server_error(client, monkeypatch):
    monkeypatch.setattr(security, "ADMIN_API_KEY", None)

    response = client.get("/api/admin/sellers/seller-1/tier", headers=admin_headers())

    assert response.status_code == 500


def test_run_enforcement(client, stores, fake_db):
    orders, sellers = stores

    response = client.post("/api/admin/enforcement/run", headers=admin_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["flagged_orders"] == ["overdue"]
    assert body["sellers"] == ["seller-2"]
    assert body["ok"] is True
    assert orders.orders["overdue"]["late"] is True
    assert sellers.sellers["seller-2"]["seller_tier"] == "BRONZE"
    assert fake_db.audit_logs.docs[-1]["actor_role"] == "admin"


def test_recompute_tier(client, stores, fake_db):
    _, sellers = stores

    response = client.post("/api/admin/sellers/seller-1/tier/recompute", headers=admin_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["seller_tier"] == "GOLD"
    assert body["stats"]["completed_orders"] == 20
    assert body["policy"]["can_auction"] is True
    assert body["policy"]["auction_fee_percent"] == 2
    assert sellers.sellers["seller-1"]["seller_tier"] == "GOLD"
    assert fake_db.audit_logs.docs[-1]["action"] == "SELLER_TIER_RECOMPUTED"


def test_recompute_unknown_seller_is_404(client):
    response = client.post("/api/admin/sellers/ghost/tier/recompute", headers=admin_headers())

    assert response.status_code == 404


def test_recompute_blank_seller_id_is_400(client):
    response = client.post("/api/admin/sellers/%20/tier/recompute", headers=admin_headers())

    assert response.status_code == 400


def test_read_stored_tier(client):
    client.post("/api/admin/sellers/seller-1/tier/recompute", headers=admin_headers())

    response = client.get("/api/admin/sellers/seller-1/tier", headers=admin_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["seller_tier"] == "GOLD"
    assert body["stats"]["on_time_shipping_rate"] == 1.0


def test_read_tier_for_unscored_seller_defaults_to_bronze(client):
    response = client.get("/api/admin/sellers/seller-2/tier", headers=admin_headers())

    body = response.json()
    assert body["stats"]["seller_tier"] == "BRONZE"
    assert body["policy"]["can_auction"] is False


def test_read_tier_tolerates_unknown_tier_and_uncapped_rate(client, stores):
    _, sellers = stores
    sellers.sellers["seller-1"].update({
        "seller_tier": "PLATINUM",
        "on_time_shipping_rate": 1.5,
        "completed_orders": 4,
    })

    response = client.get("/api/admin/sellers/seller-1/tier", headers=admin_headers())

    assert response.status_code == 200
    body = response.json()
    assert body["stats"]["seller_tier"] == "BRONZE"
    assert body["stats"]["on_time_shipping_rate"] == 1.0
    assert body["stats"]["completed_orders"] == 4
    assert body["policy"]["tier"] == "BRONZE"


def test_non_ascii_admin_key_is_rejected_not_crashed(client):
    response = client.post(
        "/api/admin/enforcement/run",
        headers={"X-Admin-Key": "clé".encode("latin-1")},
    )

    assert response.status_code == 401
