"""Fare quote endpoint with Redis caching"""
import json
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from toro_mx.schemas.quote import PricingConfig, QuoteRequest, QuoteResult
from toro_mx.services.pricing import compute_quote
from toro_mx.services.zones import pricing_for_request
from toro_mx.services.surge import current_surge
from toro_mx.services.fx import FxRateStore
from toro_mx.core.errors import InvalidInput
from toro_mx.core.metrics import cache_hits, cache_misses, fx_missing_rate, quotes_computed
from toro_mx.core.redis import get_redis
from toro_mx.core.config import settings
from toro_mx.utils.clock import get_local_now
from toro_mx.utils.hashing import quote_cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


async def _lookup_fx_rate(config: PricingConfig, display_currency: str) -> Optional[float]:
    if not display_currency or display_currency == config.currency:
        return None

    redis = get_redis()
    rate = None
    if redis is not None:
        try:
            latest = await FxRateStore(redis).latest_rate(config.currency, display_currency)
            rate = latest.rate if latest else None
        except Exception as e:
            logger.warning(f"FX rate lookup failed: {e}")

    if rate is None:
        logger.warning(f"No FX rate {config.currency}->{display_currency}; omitting display total")
        fx_missing_rate.labels(quote=display_currency).inc()
    return rate


@router.post("/calc", response_model=QuoteResult, response_model_exclude_none=True)
async def calc_quote(req: QuoteRequest, now_local: datetime = Depends(get_local_now)):

    config = pricing_for_request(req)
    surge = current_surge(config.zone_id, req.service_type)

    cache_key = quote_cache_key(req.model_dump(mode="json"), now_local.hour, now_local.weekday(), surge)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache="quote").inc()
                return QuoteResult.model_validate(json.loads(cached))
            cache_misses.labels(cache="quote").inc()
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    fx_rate = await _lookup_fx_rate(config, req.display_currency)

    try:
        result = compute_quote(req, config, now_local, surge, fx_rate)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    quotes_computed.labels(
        zone=config.zone_name,
        service_type=str(req.service_type),
        min_fare_applied=str(result.min_fare_applied).lower(),
    ).inc()

    if redis is not None:
        try:
            await redis.set(
                cache_key,
                result.model_dump_json(),
                ex=settings.QUOTE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
