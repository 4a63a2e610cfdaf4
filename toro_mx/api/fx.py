import logging
from fastapi import APIRouter, HTTPException

from toro_mx.core.redis import get_redis
from toro_mx.schemas.fx import FxRate, FxRefreshResult
from toro_mx.services.fx import FxRateStore, refresh_rates

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/fx", tags=["fx"])


def _store() -> FxRateStore:
    redis = get_redis()
    if redis is None:
        raise HTTPException(status_code=503, detail="Rate store not available")
    return FxRateStore(redis)


@router.post("/refresh", response_model=FxRefreshResult)
async def refresh():
    return await refresh_rates(_store())


@router.get("/rates/{base}/{quote}", response_model=FxRate)
async def latest_rate(base: str, quote: str):
    rate = await _store().latest_rate(base, quote)
    if rate is None:
        raise HTTPException(status_code=404, detail=f"No rate stored for {base.upper()}/{quote.upper()}")
    return rate
