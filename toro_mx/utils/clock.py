from datetime import datetime
from zoneinfo import ZoneInfo
from toro_mx.core.config import settings


def local_now(tz_name: str | None = None) -> datetime:
    return datetime.now(ZoneInfo(tz_name or settings.DEFAULT_TIMEZONE))


def get_local_now() -> datetime:
    """FastAPI dependency; overridden in tests to pin the clock."""
    return local_now()
