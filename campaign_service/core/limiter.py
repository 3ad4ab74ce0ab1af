# campaign_service/core/limiter.py
"""
HTTP rate limiter configuration module.
Separated to avoid circular imports.

This guards the endpoints against request floods per client address. The
per-user campaign quota is a business rule and lives in
services/rate_limiter.py instead.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from campaign_service.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)
