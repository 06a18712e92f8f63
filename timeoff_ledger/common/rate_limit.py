"""Per-client rate limiting (slowapi).

``RATE_LIMIT_DEFAULT`` applies to every route through ``SlowAPIMiddleware``;
set ``RATE_LIMIT_ENABLED=false`` to switch it off.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from timeoff_ledger.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
