"""Rate limiting with slowapi.

The module-level Limiter is wired into the app in main.py; endpoints that
create requests opt in with ``@limiter.limit(settings.REQUEST_RATE_LIMIT)``.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
