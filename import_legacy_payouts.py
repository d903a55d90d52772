"""
Import still-pending payout requests from a JSON export of the old document store.

    python import_legacy_payouts.py export.json

The export is expected to hold the ``payout_requests`` and/or ``payouts``
trees at its top level.
"""
import asyncio
import json
import logging
import sys
from pathlib import Path

from tindago_ledger.core.logging_config import configure_logging
from tindago_ledger.infrastructure.database import get_session, init_db
from tindago_ledger.infrastructure.legacy import LegacySchema, import_pending_payouts, translate_tree
from tindago_ledger.modules.payouts import PayoutService

logger = logging.getLogger("import_legacy_payouts")


async def import_export(path: Path) -> None:
    data = json.loads(path.read_text(encoding="utf-8"))
    records = []
    for schema in LegacySchema:
        records.extend(translate_tree(data.get(schema.value), schema))

    await init_db()
    async for db in get_session():
        # the old system never checked balances on request, so neither does the import
        service = PayoutService.with_session(db, validate_balance_on_create=False)
        result = await import_pending_payouts(service, records)
        await db.commit()

    for legacy_id, reason in result.skipped.items():
        logger.info("skipped %s: %s", legacy_id, reason)
    logger.info("Imported %s of %s legacy payout requests", len(result.imported), len(records))


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: python import_legacy_payouts.py <export.json>")
        sys.exit(2)
    configure_logging()
    asyncio.run(import_export(Path(sys.argv[1])))
