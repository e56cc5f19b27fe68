"""Rate limiting configuration using slowapi.

Module-level Limiter shared by the routers; the login routes apply a
tighter per-endpoint limit with ``@limiter.limit(LOGIN_RATE_LIMIT)``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

LOGIN_RATE_LIMIT = "10/minute"

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["60/minute"],
)
