"""
Request rate limiting (slowapi). Per-client-IP limits; the app-wide default comes from
settings.rate_limit_default, routes may tighten it with @limiter.limit(...).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from backoffice.config import settings

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
)
