from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.security import create_access_token
from tindago_ledger.modules.commission import get_rate_cache


async def record_paid_entry(client, headers, amount_cents=100000, rate=0.1, store_id="store-1"):
    response = await client.post(
        "/api/admin/transactions",
        json={"store_id": store_id, "amount_cents": amount_cents, "method": "gcash", "rate": rate},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    entry_id = response.json()["id"]
    response = await client.post(f"/api/admin/transactions/{entry_id}/paid", json={}, headers=headers)
    assert response.status_code == 200, response.text
    return entry_id


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_admin_routes_require_admin_role(client, store_headers):
    response = await client.get("/api/admin/commission", headers=store_headers)
    assert response.status_code == 403


async def test_invalid_token_is_rejected(client):
    response = await client.get("/api/admin/commission", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_commission_settings(client, admin_headers):
    response = await client.get("/api/admin/commission", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["rate"] == 0.01

    response = await client.put("/api/admin/commission", json={"rate": 0.05}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["rate"] == 0.05

    response = await client.put("/api/admin/commission", json={"rate": 1.5}, headers=admin_headers)
    assert response.status_code == 400
    assert "commission rate" in response.json()["detail"]

    response = await client.put("/api/admin/commission/stores/store-1", json={"rate": 0.02}, headers=admin_headers)
    assert response.status_code == 200
    response = await client.get("/api/admin/commission/stores/store-1", headers=admin_headers)
    assert response.json()["rate"] == 0.02
    assert response.json()["store_id"] == "store-1"

    response = await client.delete("/api/admin/commission/stores/store-1", headers=admin_headers)
    assert response.status_code == 200
    response = await client.delete("/api/admin/commission/stores/store-1", headers=admin_headers)
    assert response.status_code == 404
    response = await client.get("/api/admin/commission/stores/store-1", headers=admin_headers)
    assert response.json()["rate"] == 0.05


async def test_ledger_and_wallet_flow(client, admin_headers, store_headers):
    entry_id = await record_paid_entry(client, admin_headers)

    response = await client.get(f"/api/admin/transactions/{entry_id}", headers=admin_headers)
    body = response.json()
    assert (body["status"], body["commission_cents"], body["store_amount_cents"]) == ("PAID", 10000, 90000)

    response = await client.post(f"/api/admin/transactions/{entry_id}/paid", json={}, headers=admin_headers)
    assert response.status_code == 409

    response = await client.get("/api/stores/store-1/wallet", headers=store_headers)
    assert response.status_code == 200
    assert response.json()["available_cents"] == 90000
    assert response.json()["currency"] == "PHP"

    response = await client.get("/api/stores/store-1/wallet/transactions", headers=store_headers)
    assert [tx["type"] for tx in response.json()["transactions"]] == ["credit"]

    response = await client.get("/api/admin/transactions/summary?store_id=store-1", headers=admin_headers)
    assert response.json()["total_commission_cents"] == 10000


async def test_missing_entry_is_404(client, admin_headers):
    response = await client.get("/api/admin/transactions/nope", headers=admin_headers)
    assert response.status_code == 404
    response = await client.post("/api/admin/transactions/nope/refund", json={"reason": "x"}, headers=admin_headers)
    assert response.status_code == 404


async def test_replace_and_adjust(client, admin_headers):
    response = await client.post(
        "/api/admin/transactions",
        json={"store_id": "store-1", "amount_cents": 100000, "rate": 0.1},
        headers=admin_headers,
    )
    entry_id = response.json()["id"]

    response = await client.post(
        f"/api/admin/transactions/{entry_id}/replace-invoice",
        json={"new_rate": 0.1, "new_fee_cents": 5000},
        headers=admin_headers,
    )
    assert response.status_code == 400

    response = await client.post(
        f"/api/admin/transactions/{entry_id}/replace-invoice",
        json={"new_fee_cents": 5000},
        headers=admin_headers,
    )
    assert response.status_code == 201
    replacement = response.json()
    assert replacement["store_amount_cents"] == 95000
    assert replacement["previous_entry_id"] == entry_id

    await client.post(f"/api/admin/transactions/{replacement['id']}/paid", json={}, headers=admin_headers)

    response = await client.post(
        f"/api/admin/transactions/{replacement['id']}/adjustment",
        json={"delta_cents": -100000, "reason": "too much"},
        headers=admin_headers,
    )
    assert response.status_code == 409

    response = await client.post(
        f"/api/admin/transactions/{replacement['id']}/adjustment",
        json={"delta_cents": -5000, "reason": "partial refund"},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["actor_id"] == "admin-1"

    response = await client.get(f"/api/admin/transactions/{replacement['id']}/adjustments", headers=admin_headers)
    assert [a["delta_cents"] for a in response.json()["adjustments"]] == [-5000]

    response = await client.get("/api/admin/wallets/store-1", headers=admin_headers)
    assert response.json()["available_cents"] == 90000


async def test_payout_workflow_over_http(client, admin_headers, store_headers):
    await record_paid_entry(client, admin_headers)

    response = await client.post(
        "/api/stores/store-1/payouts",
        json={"amount_cents": 90000, "method": "gcash", "account_details": "09171234567"},
        headers=store_headers,
    )
    assert response.status_code == 201
    payout_id = response.json()["id"]
    assert response.json()["status"] == "pending"

    response = await client.post(f"/api/admin/payouts/{payout_id}/approve", json={}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "approved"

    response = await client.post(f"/api/admin/payouts/{payout_id}/approve", json={}, headers=admin_headers)
    assert response.status_code == 409

    response = await client.post(f"/api/admin/payouts/{payout_id}/complete", json={"notes": "sent"}, headers=admin_headers)
    assert response.json()["status"] == "completed"

    response = await client.get(f"/api/stores/store-1/payouts/{payout_id}/history", headers=store_headers)
    assert [e["status"] for e in response.json()["events"]] == ["pending", "approved", "completed"]

    response = await client.get("/api/stores/store-1/wallet", headers=store_headers)
    assert response.json()["available_cents"] == 0

    response = await client.get("/api/admin/payouts/stats", headers=admin_headers)
    assert response.json()["completed_count"] == 1


async def test_failed_approval_keeps_payout_pending(client, admin_headers, store_headers):
    response = await client.post(
        "/api/stores/store-1/payouts",
        json={"amount_cents": 50000, "method": "bank", "account_details": "BPI 001234"},
        headers=store_headers,
    )
    payout_id = response.json()["id"]

    response = await client.post(f"/api/admin/payouts/{payout_id}/approve", json={}, headers=admin_headers)
    assert response.status_code == 409
    assert "wallet store-1" in response.json()["detail"]

    response = await client.get(f"/api/admin/payouts/{payout_id}", headers=admin_headers)
    assert response.json()["status"] == "pending"

    response = await client.post(f"/api/admin/payouts/{payout_id}/reject", json={"reason": ""}, headers=admin_headers)
    assert response.status_code == 400
    response = await client.post(f"/api/admin/payouts/{payout_id}/complete", json={}, headers=admin_headers)
    assert response.status_code == 409


async def test_bulk_approval_over_http(client, admin_headers, store_headers):
    await record_paid_entry(client, admin_headers, amount_cents=1000, rate=0.0)
    ids = []
    for amount in (400, 700, 300):
        response = await client.post(
            "/api/stores/store-1/payouts",
            json={"amount_cents": amount, "method": "gcash", "account_details": "0917"},
            headers=store_headers,
        )
        ids.append(response.json()["id"])

    response = await client.post("/api/admin/payouts/bulk-approve", json={"payout_ids": ids}, headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["succeeded"] == [ids[0], ids[2]]
    assert [f["payout_id"] for f in body["failed"]] == [ids[1]]

    response = await client.get("/api/admin/payouts?status=pending", headers=admin_headers)
    assert [p["id"] for p in response.json()["payouts"]] == [ids[1]]


async def test_invalid_payout_request(client, store_headers):
    response = await client.post(
        "/api/stores/store-1/payouts",
        json={"amount_cents": 0, "method": "gcash", "account_details": "0917"},
        headers=store_headers,
    )
    assert response.status_code == 400


async def test_store_cannot_reach_another_store(client, store_headers):
    response = await client.get("/api/stores/store-2/wallet", headers=store_headers)
    assert response.status_code == 403

    response = await client.post(
        "/api/stores/store-2/payouts",
        json={"amount_cents": 100, "method": "gcash", "account_details": "0917"},
        headers=store_headers,
    )
    assert response.status_code == 403


async def test_admin_may_read_any_store_wallet(client, admin_headers):
    response = await client.get("/api/stores/store-9/wallet", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["total_cents"] == 0


async def test_replay_and_reconcile(client, admin_headers):
    await record_paid_entry(client, admin_headers)

    response = await client.get("/api/admin/wallets/store-1/replay", headers=admin_headers)
    assert response.json() == {
        "store_id": "store-1",
        "stored_available_cents": 90000,
        "replayed_available_cents": 90000,
        "consistent": True,
    }

    response = await client.post("/api/admin/wallets/store-1/reconcile", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["drift_cents"] == 0
    assert response.json()["available_cents"] == 90000


async def test_token_without_role_is_rejected(client):
    token = create_access_token("someone", "")
    response = await client.get("/api/stores/store-1/wallet", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_global_rate_cache_is_cleared_after_commit(client, admin_headers, monkeypatch):
    cache = get_rate_cache()
    commit = AsyncSession.commit
    stale_reads = []

    async def commit_after_stale_read(self):
        if not stale_reads:
            # another request caches the old committed rate before this write lands
            stale_reads.append(0.01)
            cache.put(0.01)
        await commit(self)

    monkeypatch.setattr(AsyncSession, "commit", commit_after_stale_read)
    response = await client.put("/api/admin/commission", json={"rate": 0.05}, headers=admin_headers)
    monkeypatch.undo()

    assert response.status_code == 200
    assert stale_reads == [0.01]
    assert cache.get() is None
    response = await client.get("/api/admin/commission", headers=admin_headers)
    assert response.json()["rate"] == 0.05
