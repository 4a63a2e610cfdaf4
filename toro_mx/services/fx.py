"""Exchange rates: provider client, Redis-backed history and the refresh job"""
import json
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx
from redis.asyncio import Redis

from toro_mx.core.config import settings
from toro_mx.core.errors import ProviderError
from toro_mx.core.metrics import fx_rates_stored, fx_fetch_failures
from toro_mx.schemas.fx import FxPair, FxRate, FxRefreshResult

logger = logging.getLogger(__name__)

SOURCE_V4 = "exchangerate-api-v4"
SOURCE_V6 = "exchangerate-api-v6"
V6_URL = "https://v6.exchangerate-api.com/v6"


class FxRateStore:
    """Per-pair rate history, newest first."""

    def __init__(self, redis: Redis):
        self.redis = redis

    @staticmethod
    def _key(base: str, quote: str) -> str:
        return f"fx:{base.upper()}:{quote.upper()}"

    async def add_rate(self, rate: FxRate) -> None:
        await self.redis.lpush(self._key(rate.base, rate.quote), rate.model_dump_json())

    async def latest_rate(self, base: str, quote: str) -> Optional[FxRate]:
        raw = await self.redis.lindex(self._key(base, quote), 0)
        if raw is None:
            return None
        return FxRate.model_validate_json(raw)

    async def history(self, base: str, quote: str, limit: int = 10) -> list[FxRate]:
        rows = await self.redis.lrange(self._key(base, quote), 0, limit - 1)
        return [FxRate.model_validate_json(r) for r in rows]

    async def prune(self, base: str, quote: str, keep: int | None = None) -> None:
        keep = keep or settings.FX_HISTORY_LIMIT
        await self.redis.ltrim(self._key(base, quote), 0, keep - 1)


def provider_source() -> str:
    return SOURCE_V6 if settings.FX_API_KEY else SOURCE_V4


def provider_url(base: str) -> str:
    if settings.FX_API_KEY:
        return f"{V6_URL}/{settings.FX_API_KEY}/latest/{base}"
    return f"{settings.FX_API_URL}/{base}"


async def fetch_rates(base: str, client: httpx.AsyncClient) -> dict[str, float]:
    """Latest rates for one base currency, keyed by quote currency."""
    response = await client.get(provider_url(base))
    if not (200 <= response.status_code < 300):
        raise ProviderError(f"Failed to fetch rates for {base}: {response.status_code}")

    try:
        data = response.json()
    except json.JSONDecodeError as e:
        raise ProviderError(f"Invalid JSON in rates response for {base}") from e

    rates = data.get("rates") or data.get("conversion_rates")
    if not rates:
        raise ProviderError(f"No rates in response for {base}")
    return rates


async def refresh_rates(
    store: FxRateStore,
    client: httpx.AsyncClient | None = None,
) -> FxRefreshResult:
    """Fetch and store every configured pair, then prune each pair's history.

    A failing base currency is logged and skipped; the others still refresh.
    """
    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(timeout=settings.FX_TIMEOUT)

    source = provider_source()
    updated: list[FxPair] = []

    try:
        for base in settings.FX_BASE_CURRENCIES:
            try:
                rates = await fetch_rates(base, client)
            except (ProviderError, httpx.HTTPError) as e:
                logger.error(f"Error fetching rates for {base}: {e}")
                fx_fetch_failures.labels(base=base).inc()
                continue

            for quote in settings.FX_QUOTE_CURRENCIES:
                if quote == base:
                    continue
                rate = rates.get(quote)
                if not rate:
                    continue

                await store.add_rate(FxRate(
                    base=base,
                    quote=quote,
                    rate=rate,
                    source=source,
                    fetched_at=datetime.now(timezone.utc),
                ))
                fx_rates_stored.labels(base=base, quote=quote).inc()
                updated.append(FxPair(base=base, quote=quote, rate=rate))
    finally:
        if own_client:
            await client.aclose()

    for base in settings.FX_BASE_CURRENCIES:
        for quote in settings.FX_QUOTE_CURRENCIES:
            if quote != base:
                await store.prune(base, quote)

    logger.info(f"FX refresh stored {len(updated)} rates from {source}")
    return FxRefreshResult(
        rates_updated=len(updated),
        rates=updated,
        source=source,
        timestamp=datetime.now(timezone.utc),
    )
