import logging
from redis.asyncio import Redis
from toro_mx.core.config import settings
from toro_mx.core.errors import ProviderError
from toro_mx.schemas.fx import FxRefreshResult
from toro_mx.services.fx import FxRateStore, refresh_rates

logger = logging.getLogger(__name__)


async def refresh_fx_rates_async() -> FxRefreshResult:
    """Background refresh of stored FX rates, on the worker's own connection"""
    redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        result = await refresh_rates(FxRateStore(redis))
    finally:
        await redis.aclose()

    if result.rates_updated == 0:
        raise ProviderError("FX refresh stored no rates")
    logger.info(f"FX refresh stored {result.rates_updated} rates from {result.source}")
    return result
