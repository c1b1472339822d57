from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from resumedoc.core.config import settings

limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


def rate_limit(scope: str = "default"):
    """Per-client limit; routes that call the AI provider use the tighter "ai" budget."""
    if not settings.rate_limit_enabled:

        def decorator(func):
            return func

        return decorator

    return limiter.limit(settings.ai_rate_limit if scope == "ai" else settings.rate_limit)
