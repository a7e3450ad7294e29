"""Per-client rate limiting for the provider-backed endpoints."""

from slowapi import Limiter
from slowapi.util import get_remote_address

# One window per client IP; limits are set per route from settings.analyze_rate_limit
limiter = Limiter(key_func=get_remote_address)
