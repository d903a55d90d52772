import asyncio

import pytest

from tindago_ledger.modules.common.exceptions import InvalidAmountError, InvalidTransitionError
from tindago_ledger.modules.payouts import (
    AlreadyProcessedError,
    InvalidPayoutRequestError,
    MissingReasonError,
    PayoutCreateInput,
    PayoutNotFoundError,
    PayoutService,
    PayoutStatus,
)
from tindago_ledger.modules.wallets import InsufficientBalanceError, WalletService


def request(amount_cents, store_id="store-1", method="gcash", account_details="09171234567", **kwargs):
    return PayoutCreateInput(
        store_id=store_id,
        amount_cents=amount_cents,
        method=method,
        account_details=account_details,
        **kwargs,
    )


async def test_approve_then_complete(payouts, wallets):
    await wallets.credit(store_id="store-1", amount_cents=90000)
    payout = await payouts.create(request(90000, notes="weekly"))
    assert payout.status is PayoutStatus.PENDING

    approved = await payouts.approve(payout.id, "admin-1", "looks good")

    assert approved.status is PayoutStatus.APPROVED
    assert approved.processed_by == "admin-1"
    assert approved.admin_notes == "looks good"
    assert (await wallets.get_balance("store-1")).available_cents == 0

    completed = await payouts.complete(payout.id, "admin-1", "transfer ref 889")

    assert completed.status is PayoutStatus.COMPLETED
    assert completed.completed_at is not None
    assert (await wallets.get_balance("store-1")).available_cents == 0
    assert len(await wallets.list_transactions("store-1")) == 2


async def test_approval_beyond_balance_leaves_payout_pending(payouts, wallets):
    payout = await payouts.create(request(50000))

    with pytest.raises(InsufficientBalanceError):
        await payouts.approve(payout.id, "admin-1")

    assert (await payouts.get(payout.id)).status is PayoutStatus.PENDING
    assert [event.status for event in await payouts.history(payout.id)] == [PayoutStatus.PENDING]
    assert (await wallets.get_balance("store-1")).available_cents == 0


async def test_bulk_approval_reports_each_payout(payouts, wallets):
    await wallets.credit(store_id="store-1", amount_cents=1000)
    p1 = await payouts.create(request(400))
    p2 = await payouts.create(request(700))
    p3 = await payouts.create(request(300))

    result = await payouts.bulk_approve([p1.id, p2.id, p3.id, p1.id], "admin-1")

    assert result.succeeded == [p1.id, p3.id]
    assert result.failed_ids == [p2.id]
    assert result.failed[0].error == "InsufficientBalanceError"
    assert (await payouts.get(p1.id)).status is PayoutStatus.APPROVED
    assert (await payouts.get(p2.id)).status is PayoutStatus.PENDING
    assert (await payouts.get(p3.id)).status is PayoutStatus.APPROVED
    assert (await payouts.get(p1.id)).admin_notes == "Bulk approved"
    assert (await wallets.get_balance("store-1")).available_cents == 300


async def test_bulk_approval_reports_unknown_ids(payouts, funded_store):
    p1 = await payouts.create(request(100))

    result = await payouts.bulk_approve(["nope", p1.id], "admin-1")

    assert result.succeeded == [p1.id]
    assert result.failed_ids == ["nope"]
    assert result.failed[0].error == "PayoutNotFoundError"


async def test_double_approval_debits_once(payouts, wallets, funded_store):
    payout = await payouts.create(request(30000))
    await payouts.approve(payout.id, "admin-1")

    with pytest.raises(AlreadyProcessedError):
        await payouts.approve(payout.id, "admin-2")

    assert (await wallets.get_balance(funded_store)).available_cents == 70000
    debits = [tx for tx in await wallets.list_transactions(funded_store) if tx.related_payout_id == payout.id]
    assert len(debits) == 1


async def test_rejection_requires_a_reason(payouts, funded_store):
    payout = await payouts.create(request(100))

    for reason in ("", "   "):
        with pytest.raises(MissingReasonError):
            await payouts.reject(payout.id, "admin-1", reason)

    rejected = await payouts.reject(payout.id, "admin-1", " wrong account ")
    assert rejected.status is PayoutStatus.REJECTED
    assert rejected.admin_notes == "wrong account"

    with pytest.raises(AlreadyProcessedError):
        await payouts.approve(payout.id, "admin-1")


async def test_rejection_moves_no_money(payouts, wallets, funded_store):
    payout = await payouts.create(request(100))
    await payouts.reject(payout.id, "admin-1", "duplicate")
    assert (await wallets.get_balance(funded_store)).available_cents == 100000


async def test_complete_requires_approval(payouts, funded_store):
    payout = await payouts.create(request(100))
    with pytest.raises(InvalidTransitionError):
        await payouts.complete(payout.id, "admin-1")

    await payouts.reject(payout.id, "admin-1", "no")
    with pytest.raises(InvalidTransitionError):
        await payouts.complete(payout.id, "admin-1")


async def test_history_is_ordered_and_append_only(payouts, funded_store):
    payout = await payouts.create(request(100, actor_id="owner-1"))
    await payouts.approve(payout.id, "admin-1", "ok")
    await payouts.complete(payout.id, "admin-2", "sent")

    history = await payouts.history(payout.id)

    assert [(e.sequence, e.status, e.actor_id) for e in history] == [
        (1, PayoutStatus.PENDING, "owner-1"),
        (2, PayoutStatus.APPROVED, "admin-1"),
        (3, PayoutStatus.COMPLETED, "admin-2"),
    ]
    assert history[2].note == "sent"


async def test_unknown_payout(payouts):
    with pytest.raises(PayoutNotFoundError):
        await payouts.get("missing")
    with pytest.raises(PayoutNotFoundError):
        await payouts.approve("missing", "admin-1")
    with pytest.raises(PayoutNotFoundError):
        await payouts.history("missing")


@pytest.mark.parametrize(
    "payload, error",
    [
        (request(0), InvalidAmountError),
        (request(-10), InvalidAmountError),
        (request(100, method="crypto"), InvalidPayoutRequestError),
        (request(100, account_details="  "), InvalidPayoutRequestError),
    ],
)
async def test_invalid_requests_are_rejected(payouts, payload, error):
    with pytest.raises(error):
        await payouts.create(payload)
    assert await payouts.list_payouts() == []


async def test_method_is_case_insensitive(payouts):
    payout = await payouts.create(request(100, method="PayMaya"))
    assert payout.method.value == "paymaya"


async def test_optional_balance_check_on_creation(session):
    strict = PayoutService.with_session(session, validate_balance_on_create=True)
    with pytest.raises(InsufficientBalanceError):
        await strict.create(request(500))


async def test_listing_and_stats(payouts, funded_store):
    p1 = await payouts.create(request(100))
    p2 = await payouts.create(request(200))
    p3 = await payouts.create(request(300))
    await payouts.create(request(400, store_id="store-2"))
    await payouts.approve(p1.id, "admin-1")
    await payouts.approve(p2.id, "admin-1")
    await payouts.complete(p2.id, "admin-1")
    await payouts.reject(p3.id, "admin-1", "no")

    assert len(await payouts.list_payouts(store_id="store-1")) == 3
    assert [p.id for p in await payouts.list_payouts(status="approved")] == [p1.id]
    assert len(await payouts.list_payouts(status="all")) == 4

    stats = await payouts.stats()
    assert stats.total_requests == 4
    assert stats.total_amount_cents == 1000
    assert (stats.pending_count, stats.approved_count, stats.completed_count, stats.rejected_count) == (1, 1, 1, 1)
    assert stats.pending_amount_cents == 400
    assert stats.approved_amount_cents == 100

    store_stats = await payouts.stats("store-2")
    assert store_stats.total_requests == 1


async def test_concurrent_approvals_cannot_overdraw(session_factory):
    async with session_factory() as setup:
        await WalletService.with_session(setup).credit(store_id="S1", amount_cents=10000)
        service = PayoutService.with_session(setup)
        first = await service.create(request(6000, store_id="S1"))
        second = await service.create(request(6000, store_id="S1"))
        await setup.commit()

    async def approve(payout_id):
        async with session_factory() as session:
            try:
                await PayoutService.with_session(session).approve(payout_id, "admin-1")
            except InsufficientBalanceError:
                await session.rollback()
                return "insufficient"
            await session.commit()
            return "approved"

    outcomes = await asyncio.gather(approve(first.id), approve(second.id))

    assert sorted(outcomes) == ["approved", "insufficient"]
    async with session_factory() as check:
        assert (await WalletService.with_session(check).get_balance("S1")).available_cents == 4000
        statuses = sorted(p.status.value for p in await PayoutService.with_session(check).list_payouts("S1"))
        assert statuses == ["approved", "pending"]
