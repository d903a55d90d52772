"""Ledger specific exceptions."""

from tindago_ledger.modules.common.exceptions import FinanceError, NotFoundError


class LedgerEntryNotFoundError(NotFoundError):
    """Raised when the requested ledger entry does not exist."""

    entity = "ledger entry"

    def __init__(self, entry_id: str) -> None:
        super().__init__("no such ledger entry", entity_id=entry_id)


class AmbiguousReplacementError(FinanceError):
    """Raised when an invoice replacement names both or neither of rate and fee."""

    entity = "ledger entry"
