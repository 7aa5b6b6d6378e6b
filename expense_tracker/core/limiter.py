from slowapi import Limiter
from slowapi.util import get_remote_address

from expense_tracker.core.config import settings

# Keyed by client IP, counters kept in process memory
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."
