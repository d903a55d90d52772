"""Commission specific exceptions."""

from tindago_ledger.modules.common.exceptions import FinanceError


class InvalidRateError(FinanceError):
    """Raised when a commission rate falls outside [0, 1]."""

    entity = "commission rate"
