"""Commission rate resolution with per-store overrides over a cached global default."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tindago_ledger.core.config import get_settings
from tindago_ledger.db.models import CommissionSetting as CommissionSettingModel
from tindago_ledger.infrastructure.database.repositories.commission_repository import SqlCommissionRepository

from .exceptions import InvalidRateError
from .models import GLOBAL_SCOPE, CommissionRate
from .repository import CommissionRepository

logger = logging.getLogger(__name__)


def store_scope(store_id: str) -> str:
    return f"store:{store_id}"


@dataclass(slots=True)
class RateCache:
    """Process-local cache for the global rate; staleness up to ``ttl`` is accepted."""

    ttl: float
    clock: Callable[[], float] = time.monotonic
    _value: Optional[float] = field(default=None, init=False)
    _expires_at: float = field(default=0.0, init=False)

    def get(self) -> Optional[float]:
        if self._value is not None and self._expires_at > self.clock():
            return self._value
        return None

    def put(self, value: float) -> None:
        self._value = value
        self._expires_at = self.clock() + self.ttl

    def invalidate(self) -> None:
        self._value = None
        self._expires_at = 0.0


_global_rate_cache: RateCache | None = None


def get_rate_cache() -> RateCache:
    global _global_rate_cache
    if _global_rate_cache is None:
        _global_rate_cache = RateCache(ttl=get_settings().commission.cache_ttl_seconds)
    return _global_rate_cache


def validate_rate(rate: float, *, scope: str = GLOBAL_SCOPE) -> float:
    try:
        value = float(rate)
    except (TypeError, ValueError) as exc:
        raise InvalidRateError(f"rate {rate!r} is not a number", entity_id=scope) from exc
    if math.isnan(value) or value < 0 or value > 1:
        raise InvalidRateError(f"rate {rate!r} must be between 0 and 1", entity_id=scope)
    return value


class CommissionResolver:
    """Resolves the effective commission rate for a store."""

    def __init__(
        self,
        repository: CommissionRepository,
        cache: RateCache | None = None,
        default_rate: float | None = None,
    ) -> None:
        self._repository = repository
        self._cache = cache or get_rate_cache()
        self._default_rate = (
            default_rate if default_rate is not None else get_settings().commission.default_rate
        )

    @classmethod
    def with_session(cls, session: AsyncSession, cache: RateCache | None = None) -> "CommissionResolver":
        return cls(SqlCommissionRepository(session), cache=cache)

    async def resolve_rate(self, store_id: str | None = None) -> float:
        if store_id:
            override = await self._repository.get_setting(store_scope(store_id))
            if override is not None:
                return override.rate

        cached = self._cache.get()
        if cached is not None:
            return cached

        setting = await self._repository.get_setting(GLOBAL_SCOPE)
        if setting is None:
            logger.info("No global commission rate stored, seeding default %.4f", self._default_rate)
            setting = await self._repository.upsert_setting(GLOBAL_SCOPE, self._default_rate)
        self._cache.put(setting.rate)
        return setting.rate

    async def get_rate_detail(self, store_id: str | None = None) -> CommissionRate:
        """Like ``resolve_rate`` but reports which scope the rate came from."""
        if store_id:
            override = await self._repository.get_setting(store_scope(store_id))
            if override is not None:
                return self._to_domain(override, store_id=store_id)
        rate = await self.resolve_rate()
        return CommissionRate(rate=rate, scope=GLOBAL_SCOPE)

    async def set_global_rate(self, rate: float) -> CommissionRate:
        """Persist the global rate.

        Callers must call ``invalidate_cache`` again after committing: a
        concurrent reader can cache the old committed rate until then.
        """
        value = validate_rate(rate)
        setting = await self._repository.upsert_setting(GLOBAL_SCOPE, value)
        self._cache.invalidate()
        logger.info("Global commission rate set to %.4f", value)
        return self._to_domain(setting)

    async def set_store_rate(self, store_id: str, rate: float) -> CommissionRate:
        scope = store_scope(store_id)
        value = validate_rate(rate, scope=scope)
        setting = await self._repository.upsert_setting(scope, value)
        logger.info("Commission override for store %s set to %.4f", store_id, value)
        return self._to_domain(setting, store_id=store_id)

    async def clear_store_rate(self, store_id: str) -> bool:
        removed = await self._repository.delete_setting(store_scope(store_id))
        if removed:
            logger.info("Commission override for store %s cleared", store_id)
        return removed

    def invalidate_cache(self) -> None:
        self._cache.invalidate()

    @staticmethod
    def _to_domain(model: CommissionSettingModel, store_id: str | None = None) -> CommissionRate:
        return CommissionRate(
            rate=model.rate,
            scope=model.scope,
            store_id=store_id,
            updated_at=model.updated_at,
        )
