"""Errors shared by the finance modules.

Every error names the entity it concerns and the rule that was violated so the
message can be shown to an admin as-is.
"""

from __future__ import annotations


class FinanceError(Exception):
    """Base class for expected, recoverable business errors."""

    entity: str = "record"

    def __init__(self, message: str, *, entity_id: str | None = None, entity: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.entity_id = entity_id
        if entity is not None:
            self.entity = entity

    def __str__(self) -> str:
        if self.entity_id:
            return f"{self.entity} {self.entity_id}: {self.message}"
        return self.message


class NotFoundError(FinanceError):
    """Raised when the referenced record does not exist."""


class InvalidAmountError(FinanceError):
    """Raised when a money-moving operation receives a non-positive amount."""


class InvalidTransitionError(FinanceError):
    """Raised when an operation is not allowed from the record's current status."""
