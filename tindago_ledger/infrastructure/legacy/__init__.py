"""Adapters for data exported from the previous document store."""

from .payout_adapter import (
    LegacyImportResult,
    LegacyPayoutRecord,
    LegacySchema,
    import_pending_payouts,
    translate_record,
    translate_tree,
)

__all__ = [
    "LegacyImportResult",
    "LegacyPayoutRecord",
    "LegacySchema",
    "import_pending_payouts",
    "translate_record",
    "translate_tree",
]
