"""
Rebuild store wallet balances from the ledger.

Run nightly, or by hand after a suspected drift:

    python reconcile_wallets.py                 # every known store
    python reconcile_wallets.py store-1 store-2 # selected stores
"""
import asyncio
import logging
import sys

from sqlalchemy import select, union

from tindago_ledger.core.logging_config import configure_logging
from tindago_ledger.db.models import LedgerEntry, Payout, Wallet
from tindago_ledger.infrastructure.database import get_session, init_db
from tindago_ledger.modules.wallets import WalletService

logger = logging.getLogger("reconcile_wallets")


async def reconcile(store_ids: list[str]) -> int:
    """Return the number of stores whose balance changed."""
    await init_db()

    changed = 0
    async for db in get_session():
        if not store_ids:
            stmt = union(
                select(LedgerEntry.store_id),
                select(Wallet.store_id),
                select(Payout.store_id),
            )
            store_ids = sorted(row[0] for row in (await db.execute(stmt)).all())

        service = WalletService.with_session(db)
        for store_id in store_ids:
            result = await service.reconcile_from_ledger(store_id)
            if result.drift_cents or result.pending_cents != result.previous_pending_cents:
                changed += 1
                logger.info(
                    "%s: available %s -> %s, pending %s -> %s%s",
                    store_id,
                    result.previous_available_cents,
                    result.available_cents,
                    result.previous_pending_cents,
                    result.pending_cents,
                    " (clamped)" if result.clamped else "",
                )
        await db.commit()

    logger.info("Reconciled %s stores, %s changed", len(store_ids), changed)
    return changed


if __name__ == "__main__":
    configure_logging()
    asyncio.run(reconcile(sys.argv[1:]))
