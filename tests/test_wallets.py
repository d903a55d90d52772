import pytest

from tindago_ledger.infrastructure.database.repositories.wallet_repository import SqlWalletRepository
from tindago_ledger.modules.common.exceptions import InvalidAmountError, NotFoundError
from tindago_ledger.modules.ledger import LedgerStatus
from tindago_ledger.modules.payouts import PayoutCreateInput
from tindago_ledger.modules.wallets import InsufficientBalanceError, WalletSource, WalletTransactionType


async def test_unknown_store_reads_as_empty_wallet(wallets):
    balance = await wallets.get_balance("nobody")
    assert (balance.available_cents, balance.pending_cents, balance.total_cents) == (0, 0, 0)
    assert balance.updated_at is None


async def test_credit_then_debit(wallets):
    await wallets.credit(store_id="S1", amount_cents=10000, description="Order 1")
    balance = await wallets.debit(store_id="S1", amount_cents=2500, payout_id="p-1")

    assert balance.available_cents == 7500
    transactions = await wallets.list_transactions("S1")
    assert {(tx.type, tx.amount_cents) for tx in transactions} == {
        (WalletTransactionType.CREDIT, 10000),
        (WalletTransactionType.DEBIT, 2500),
    }
    debit = next(tx for tx in transactions if tx.type is WalletTransactionType.DEBIT)
    assert debit.related_payout_id == "p-1"
    assert debit.source == WalletSource.PAYOUT.value
    assert debit.signed_amount_cents == -2500


async def test_debit_never_takes_the_balance_negative(wallets):
    await wallets.credit(store_id="S1", amount_cents=1000)

    with pytest.raises(InsufficientBalanceError) as excinfo:
        await wallets.debit(store_id="S1", amount_cents=1001)

    assert excinfo.value.requested_cents == 1001
    assert excinfo.value.available_cents == 1000
    assert (await wallets.get_balance("S1")).available_cents == 1000
    assert len(await wallets.list_transactions("S1")) == 1


async def test_debit_from_missing_wallet_is_insufficient(wallets):
    with pytest.raises(InsufficientBalanceError) as excinfo:
        await wallets.debit(store_id="ghost", amount_cents=1)
    assert excinfo.value.available_cents == 0


@pytest.mark.parametrize("amount", [0, -5])
async def test_movements_must_be_positive(wallets, amount):
    with pytest.raises(InvalidAmountError):
        await wallets.credit(store_id="S1", amount_cents=amount)
    with pytest.raises(InvalidAmountError):
        await wallets.debit(store_id="S1", amount_cents=amount)


async def test_replay_matches_stored_balance(wallets):
    await wallets.credit(store_id="S1", amount_cents=5000)
    await wallets.credit(store_id="S1", amount_cents=700, source=WalletSource.ADJUSTMENT.value)
    await wallets.debit(store_id="S1", amount_cents=1200)

    assert await wallets.replay_balance("S1") == 4500
    assert (await wallets.get_balance("S1")).available_cents == 4500


async def test_reconcile_is_idempotent(ledger, wallets, payouts):
    paid = await ledger.record_transaction(store_id="S1", amount_cents=10000, method="gcash", rate=0.1)
    await ledger.mark_paid(paid.id)
    await ledger.record_adjustment(paid.id, 500, "goodwill")
    await ledger.record_transaction(store_id="S1", amount_cents=5000, method="gcash", rate=0.1)
    payout = await payouts.create(
        PayoutCreateInput(store_id="S1", amount_cents=2000, method="gcash", account_details="09171234567")
    )
    await payouts.approve(payout.id, "admin-1")

    first = await wallets.reconcile_from_ledger("S1")
    transactions_after_first = len(await wallets.list_transactions("S1"))
    second = await wallets.reconcile_from_ledger("S1")

    assert first.available_cents == second.available_cents == 7500
    assert first.drift_cents == 0
    assert first.pending_cents == second.pending_cents == 4500
    assert second.previous_pending_cents == 4500
    assert len(await wallets.list_transactions("S1")) == transactions_after_first
    balance = await wallets.get_balance("S1")
    assert (balance.available_cents, balance.pending_cents, balance.total_cents) == (7500, 4500, 12000)


async def test_reconcile_repairs_a_missing_credit(ledger, wallets):
    entry = await ledger.record_transaction(store_id="S1", amount_cents=10000, method="gcash", rate=0.1)
    # confirm the entry without going through the service, so no credit is written
    await ledger._repository.transition(
        entry.id, from_statuses=[LedgerStatus.PENDING.value], to_status=LedgerStatus.PAID.value
    )
    assert (await wallets.get_balance("S1")).available_cents == 0

    result = await wallets.reconcile_from_ledger("S1")

    assert result.drift_cents == 9000
    assert (await wallets.get_balance("S1")).available_cents == 9000
    assert await wallets.replay_balance("S1") == 9000
    repair = (await wallets.list_transactions("S1"))[0]
    assert repair.source == WalletSource.RECONCILIATION.value
    assert repair.type is WalletTransactionType.CREDIT


async def test_reconcile_clamps_negative_derived_balance(ledger, wallets, payouts):
    entry = await ledger.record_transaction(store_id="S1", amount_cents=10000, method="gcash", rate=0.1)
    await ledger.mark_paid(entry.id)
    payout = await payouts.create(
        PayoutCreateInput(store_id="S1", amount_cents=9000, method="bank", account_details="BPI 1234")
    )
    await payouts.approve(payout.id, "admin-1")
    await ledger.mark_refunded(entry.id, "chargeback")

    result = await wallets.reconcile_from_ledger("S1")

    assert result.clamped is True
    assert result.available_cents == 0
    assert (await wallets.get_balance("S1")).available_cents == 0


async def test_reconcile_after_reversed_refund_keeps_other_earnings(ledger, wallets):
    refunded = await ledger.record_transaction(store_id="S1", amount_cents=100000, method="gcash", rate=0.1)
    kept = await ledger.record_transaction(store_id="S1", amount_cents=50000, method="gcash", rate=0.1)
    await ledger.mark_paid(refunded.id)
    await ledger.mark_paid(kept.id)
    await ledger.record_adjustment(refunded.id, -90000, "refund reversal")
    await ledger.mark_refunded(refunded.id, "Customer cancelled")
    assert (await wallets.get_balance("S1")).available_cents == 45000

    result = await wallets.reconcile_from_ledger("S1")

    assert result.drift_cents == 0
    assert result.clamped is False
    assert (await wallets.get_balance("S1")).available_cents == 45000
    assert await wallets.replay_balance("S1") == 45000


async def test_pending_follows_invoices_until_confirmed(ledger, wallets):
    entry = await ledger.record_transaction(store_id="S1", amount_cents=100000, method="gcash", rate=0.1)
    balance = await wallets.get_balance("S1")
    assert (balance.available_cents, balance.pending_cents, balance.total_cents) == (0, 90000, 90000)

    await wallets.reconcile_from_ledger("S1")
    await ledger.mark_paid(entry.id)

    balance = await wallets.get_balance("S1")
    assert (balance.available_cents, balance.pending_cents, balance.total_cents) == (90000, 0, 90000)


async def test_replaced_invoice_moves_pending_to_the_new_amount(ledger, wallets):
    entry = await ledger.record_transaction(store_id="S1", amount_cents=100000, method="gcash", rate=0.1)

    await ledger.replace_invoice(entry.id, new_fee_cents=5000)

    assert (await wallets.get_balance("S1")).pending_cents == 95000
    result = await wallets.reconcile_from_ledger("S1")
    assert result.previous_pending_cents == result.pending_cents == 95000


async def test_loading_a_missing_wallet_raises(session):
    with pytest.raises(NotFoundError) as excinfo:
        await SqlWalletRepository(session).load_wallet("ghost")
    assert str(excinfo.value) == "wallet ghost: no wallet record"
