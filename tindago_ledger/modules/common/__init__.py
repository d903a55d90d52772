"""Shared building blocks for the finance modules."""

from .exceptions import FinanceError, InvalidAmountError, InvalidTransitionError, NotFoundError
from .repository import AsyncRepository

__all__ = [
    "AsyncRepository",
    "FinanceError",
    "InvalidAmountError",
    "InvalidTransitionError",
    "NotFoundError",
]
