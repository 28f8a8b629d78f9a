import logging
from typing import Any, Optional

from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import Settings, get_settings

logger = logging.getLogger("string_analyzer.limiter")


def create_limiter(settings: Optional[Settings] = None) -> Limiter:
    settings = settings or get_settings()
    try:
        return Limiter(
            key_func=get_remote_address,
            default_limits=[settings.default_rate_limit],
            storage_uri=settings.RATE_LIMIT_STORAGE_URI,
            enabled=settings.RATE_LIMIT_ENABLED,
        )
    except Exception:
        logger.exception("Failed to create slowapi Limiter")
        raise


def get_middleware() -> Any:
    return SlowAPIMiddleware
