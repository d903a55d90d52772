"""Wallet specific exceptions."""

from tindago_ledger.modules.common.exceptions import FinanceError


class InsufficientBalanceError(FinanceError):
    """Raised when a debit exceeds the wallet's available balance."""

    entity = "wallet"

    def __init__(self, store_id: str, requested_cents: int, available_cents: int) -> None:
        super().__init__(
            f"debit of {requested_cents} cents exceeds available balance of {available_cents} cents",
            entity_id=store_id,
        )
        self.requested_cents = requested_cents
        self.available_cents = available_cents
