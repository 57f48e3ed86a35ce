from slowapi import Limiter
from slowapi.util import get_remote_address

from worklog.core.config import settings

# Per-route limits are declared with @limiter.limit on the auth endpoints
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)
