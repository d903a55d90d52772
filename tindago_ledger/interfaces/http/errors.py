"""Translate domain errors into HTTP responses."""

from fastapi import HTTPException, status

from tindago_ledger.modules.common.exceptions import (
    FinanceError,
    InvalidTransitionError,
    NotFoundError,
)
from tindago_ledger.modules.payouts import AlreadyProcessedError
from tindago_ledger.modules.wallets import InsufficientBalanceError

_CONFLICTS = (InvalidTransitionError, AlreadyProcessedError, InsufficientBalanceError)


def to_http_exception(exc: FinanceError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, _CONFLICTS):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))
