"""Read payout requests exported from the two historical document trees.

Older clients wrote to ``payout_requests`` with a ``method`` key and a
structured ``accountDetails`` object; newer ones wrote to ``payouts`` with
``paymentMethod`` and a plain string. Both carry amounts in currency units and
timestamps as ISO strings. Records are normalised here so the payout workflow
only ever sees :class:`PayoutCreateInput`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

from tindago_ledger.core.money import to_cents
from tindago_ledger.modules.common.exceptions import FinanceError
from tindago_ledger.modules.payouts import (
    InvalidPayoutRequestError,
    PayoutCreateInput,
    PayoutService,
    PayoutStatus,
)

logger = logging.getLogger(__name__)

# field order used when flattening structured account details
_ACCOUNT_FIELDS = ("bankName", "accountName", "accountNumber", "mobileNumber")


class LegacySchema(str, Enum):
    PAYOUT_REQUESTS = "payout_requests"
    PAYOUTS = "payouts"


@dataclass(slots=True)
class LegacyPayoutRecord:
    legacy_id: str
    schema: LegacySchema
    request: PayoutCreateInput
    status: PayoutStatus
    requested_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    processed_by: Optional[str] = None
    admin_notes: Optional[str] = None


@dataclass(slots=True)
class LegacyImportResult:
    imported: dict[str, str] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.warning("Unparseable legacy timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_account_details(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Mapping):
        ordered = [key for key in _ACCOUNT_FIELDS if value.get(key)]
        ordered += sorted(key for key in value if key not in _ACCOUNT_FIELDS and value.get(key))
        return ", ".join(f"{key}: {value[key]}" for key in ordered)
    return str(value).strip()


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def translate_record(legacy_id: str, raw: Mapping[str, Any], schema: LegacySchema | str) -> LegacyPayoutRecord:
    schema = LegacySchema(schema)
    store_id = _first(raw, "storeId", "store_id")
    if not store_id:
        raise InvalidPayoutRequestError("legacy record has no store id", entity_id=legacy_id)

    try:
        amount_cents = to_cents(_first(raw, "amount") or 0)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidPayoutRequestError(
            f"legacy amount {raw.get('amount')!r} is not a number", entity_id=legacy_id
        ) from exc

    if schema is LegacySchema.PAYOUT_REQUESTS:
        method = _first(raw, "method", "paymentMethod")
    else:
        method = _first(raw, "paymentMethod", "method")

    status_text = str(raw.get("status") or PayoutStatus.PENDING.value).lower()
    try:
        status = PayoutStatus(status_text)
    except ValueError as exc:
        raise InvalidPayoutRequestError(f"unknown legacy status {status_text!r}", entity_id=legacy_id) from exc

    return LegacyPayoutRecord(
        legacy_id=legacy_id,
        schema=schema,
        request=PayoutCreateInput(
            store_id=str(store_id),
            amount_cents=amount_cents,
            method=str(method or "").lower(),
            account_details=format_account_details(raw.get("accountDetails")),
            notes=raw.get("notes") or None,
        ),
        status=status,
        requested_at=parse_timestamp(raw.get("requestedAt")),
        processed_at=parse_timestamp(raw.get("processedAt")),
        processed_by=raw.get("processedBy") or None,
        admin_notes=raw.get("adminNotes") or None,
    )


def translate_tree(tree: Mapping[str, Mapping[str, Any]] | None, schema: LegacySchema | str) -> list[LegacyPayoutRecord]:
    """Translate an exported ``{id: record}`` tree, oldest request first."""
    records = [translate_record(legacy_id, raw, schema) for legacy_id, raw in (tree or {}).items()]
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    records.sort(key=lambda record: record.requested_at or epoch)
    return records


async def import_pending_payouts(
    service: PayoutService,
    records: Iterable[LegacyPayoutRecord],
) -> LegacyImportResult:
    """Re-create still-pending legacy requests through the payout workflow.

    Processed requests are reported as skipped; their money already moved in
    the old system.
    """
    result = LegacyImportResult()
    for record in records:
        if record.status is not PayoutStatus.PENDING:
            result.skipped[record.legacy_id] = f"already {record.status.value}"
            continue
        try:
            payout = await service.create(record.request)
        except FinanceError as exc:
            logger.warning("Legacy payout %s not imported: %s", record.legacy_id, exc)
            result.skipped[record.legacy_id] = str(exc)
        else:
            result.imported[record.legacy_id] = payout.id
    logger.info("Legacy payout import: %s imported, %s skipped", len(result.imported), len(result.skipped))
    return result
