"""Domain models for commission settings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

GLOBAL_SCOPE = "global"


@dataclass(slots=True)
class CommissionRate:
    rate: float
    scope: str
    store_id: Optional[str] = None
    updated_at: Optional[datetime] = None

    @property
    def is_store_override(self) -> bool:
        return self.store_id is not None
