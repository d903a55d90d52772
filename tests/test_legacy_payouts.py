from datetime import datetime, timezone

import pytest

from tindago_ledger.infrastructure.legacy import (
    LegacySchema,
    import_pending_payouts,
    translate_record,
    translate_tree,
)
from tindago_ledger.modules.payouts import InvalidPayoutRequestError, PayoutService, PayoutStatus

LEGACY_REQUESTS = {
    "-Nold1": {
        "storeId": "store-1",
        "storeName": "Aling Nena",
        "amount": 1250.5,
        "method": "BANK",
        "accountDetails": {"accountNumber": "001234", "bankName": "BPI", "accountName": "Nena Cruz"},
        "status": "approved",
        "requestedAt": "2024-03-01T08:00:00.000Z",
        "processedAt": "2024-03-02T09:30:00.000Z",
        "adminNotes": "paid",
    },
}

NEW_PAYOUTS = {
    "-Nnew2": {
        "storeId": "store-1",
        "amount": "300",
        "paymentMethod": "gcash",
        "accountDetails": "09171234567",
        "status": "pending",
        "requestedAt": "2024-05-10T10:00:00Z",
        "notes": "",
    },
    "-Nnew1": {
        "storeId": "store-2",
        "amount": 99.99,
        "paymentMethod": "paymaya",
        "accountDetails": "09981112222",
        "status": "pending",
        "requestedAt": "2024-05-09T10:00:00Z",
    },
}


def test_legacy_tree_uses_method_and_structured_account():
    record = translate_record("-Nold1", LEGACY_REQUESTS["-Nold1"], "payout_requests")

    assert record.schema is LegacySchema.PAYOUT_REQUESTS
    assert record.status is PayoutStatus.APPROVED
    assert record.request.store_id == "store-1"
    assert record.request.amount_cents == 125050
    assert record.request.method == "bank"
    assert record.request.account_details == "bankName: BPI, accountName: Nena Cruz, accountNumber: 001234"
    assert record.requested_at == datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert record.admin_notes == "paid"


def test_new_tree_uses_payment_method_and_plain_account():
    record = translate_record("-Nnew2", NEW_PAYOUTS["-Nnew2"], LegacySchema.PAYOUTS)

    assert record.request.method == "gcash"
    assert record.request.account_details == "09171234567"
    assert record.request.amount_cents == 30000
    assert record.request.notes is None
    assert record.status is PayoutStatus.PENDING


def test_tree_is_sorted_oldest_first():
    records = translate_tree(NEW_PAYOUTS, "payouts")
    assert [r.legacy_id for r in records] == ["-Nnew1", "-Nnew2"]
    assert translate_tree(None, "payouts") == []


@pytest.mark.parametrize(
    "raw",
    [
        {"amount": 10, "method": "gcash"},
        {"storeId": "s", "amount": "ten", "method": "gcash"},
        {"storeId": "s", "amount": 10, "method": "gcash", "status": "lost"},
    ],
)
def test_unusable_records_are_rejected(raw):
    with pytest.raises(InvalidPayoutRequestError):
        translate_record("-Nbad", raw, "payout_requests")


async def test_only_pending_requests_are_imported(session):
    records = translate_tree(LEGACY_REQUESTS, "payout_requests") + translate_tree(NEW_PAYOUTS, "payouts")
    service = PayoutService.with_session(session, validate_balance_on_create=False)

    result = await import_pending_payouts(service, records)

    assert set(result.imported) == {"-Nnew1", "-Nnew2"}
    assert result.skipped == {"-Nold1": "already approved"}
    imported = await service.get(result.imported["-Nnew1"])
    assert imported.store_id == "store-2"
    assert imported.amount_cents == 9999
    assert imported.status is PayoutStatus.PENDING
