"""Payout workflow exports"""

from .exceptions import (
    AlreadyProcessedError,
    InvalidPayoutRequestError,
    MissingReasonError,
    PayoutError,
    PayoutNotFoundError,
)
from .models import (
    BulkApprovalFailure,
    BulkApprovalResult,
    PayoutCreateInput,
    PayoutMethod,
    PayoutRequest,
    PayoutStats,
    PayoutStatus,
    PayoutStatusEvent,
)
from .service import PayoutService

__all__ = [
    "AlreadyProcessedError",
    "BulkApprovalFailure",
    "BulkApprovalResult",
    "InvalidPayoutRequestError",
    "MissingReasonError",
    "PayoutCreateInput",
    "PayoutError",
    "PayoutMethod",
    "PayoutNotFoundError",
    "PayoutRequest",
    "PayoutService",
    "PayoutStats",
    "PayoutStatus",
    "PayoutStatusEvent",
]
