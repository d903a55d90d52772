"""Payout workflow exceptions."""

from tindago_ledger.modules.common.exceptions import FinanceError, NotFoundError


class PayoutError(FinanceError):
    """Base class for payout workflow errors."""

    entity = "payout"


class PayoutNotFoundError(NotFoundError):
    """Raised when the requested payout does not exist."""

    entity = "payout"

    def __init__(self, payout_id: str) -> None:
        super().__init__("no such payout request", entity_id=payout_id)


class AlreadyProcessedError(PayoutError):
    """Raised when approving or rejecting a payout that is no longer pending."""


class MissingReasonError(PayoutError):
    """Raised when a rejection is submitted without a reason."""


class InvalidPayoutRequestError(PayoutError):
    """Raised when a payout request names an unknown method or no destination account."""
