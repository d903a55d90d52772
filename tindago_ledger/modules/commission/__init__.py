"""Commission domain exports"""

from .exceptions import InvalidRateError
from .models import GLOBAL_SCOPE, CommissionRate
from .service import CommissionResolver, RateCache, get_rate_cache, store_scope, validate_rate

__all__ = [
    "GLOBAL_SCOPE",
    "CommissionRate",
    "CommissionResolver",
    "InvalidRateError",
    "RateCache",
    "get_rate_cache",
    "store_scope",
    "validate_rate",
]
