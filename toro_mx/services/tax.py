"""ISR and IVA retention for platform drivers in Mexico.

Drivers with a validated RFC are withheld 2.5% ISR, drivers without one 20%.
IVA is withheld at 8%; the remaining 8% of the 16% IVA the driver pays to
SAT directly, reported as ``iva_driver_owes``. Other countries pass through
untouched.
"""
import logging
from datetime import datetime
from typing import Optional

from redis.asyncio import Redis

from toro_mx.core.errors import InvalidInput
from toro_mx.core.metrics import tax_retentions
from toro_mx.schemas.tax import MonthlyTaxSummary, TaxRetention
from toro_mx.services.pricing import round2

logger = logging.getLogger(__name__)

MX_RETENTION_RATES = {
    "isr_rate_with_rfc": 0.025,
    "isr_rate_without_rfc": 0.20,
    "iva_retention_rate": 0.08,
}

CURRENCY_BY_COUNTRY = {
    "MX": "MXN",
    "US": "USD",
}


def compute_retention(
    gross_amount: float,
    country_code: str,
    has_rfc: bool,
    rates: Optional[dict] = None,
) -> TaxRetention:
    if gross_amount <= 0:
        raise InvalidInput("gross_amount must be greater than 0")

    tax_retentions.labels(country=country_code, has_rfc=str(has_rfc).lower()).inc()

    if country_code != "MX":
        return TaxRetention(
            gross_amount=gross_amount,
            has_rfc=False,
            isr_rate=0.0,
            isr_amount=0.0,
            iva_rate=0.0,
            iva_amount=0.0,
            iva_driver_owes=0.0,
            net_amount=gross_amount,
            currency=CURRENCY_BY_COUNTRY.get(country_code, "USD"),
        )

    rates = {**MX_RETENTION_RATES, **(rates or {})}
    isr_rate = rates["isr_rate_with_rfc"] if has_rfc else rates["isr_rate_without_rfc"]
    iva_rate = rates["iva_retention_rate"]

    isr_amount = round2(gross_amount * isr_rate)
    iva_amount = round2(gross_amount * iva_rate)

    return TaxRetention(
        gross_amount=gross_amount,
        has_rfc=has_rfc,
        isr_rate=isr_rate,
        isr_amount=isr_amount,
        iva_rate=iva_rate,
        iva_amount=iva_amount,
        iva_driver_owes=iva_amount,
        net_amount=round2(gross_amount - isr_amount - iva_amount),
        currency="MXN",
    )


class TaxLedger:
    """Monthly retention totals per driver, one Redis hash per period."""

    AMOUNT_FIELDS = {
        "total_gross": "gross_amount",
        "total_isr_retained": "isr_amount",
        "total_iva_retained": "iva_amount",
        "total_iva_driver_owes": "iva_driver_owes",
        "total_net": "net_amount",
    }

    def __init__(self, redis: Redis):
        self.redis = redis

    @staticmethod
    def _key(driver_id: str, year: int, month: int) -> str:
        return f"tax:summary:{driver_id}:{year:04d}-{month:02d}"

    async def record(self, driver_id: str, retention: TaxRetention, when: datetime) -> MonthlyTaxSummary:
        key = self._key(driver_id, when.year, when.month)
        pipe = self.redis.pipeline()
        for field, attr in self.AMOUNT_FIELDS.items():
            pipe.hincrbyfloat(key, field, getattr(retention, attr))
        pipe.hincrby(key, "transaction_count", 1)
        pipe.hset(key, "had_rfc", int(retention.has_rfc))
        await pipe.execute()
        logger.info(f"Recorded retention for driver {driver_id} in {when.year}-{when.month:02d}")
        return await self.monthly_summary(driver_id, when.year, when.month)

    async def monthly_summary(self, driver_id: str, year: int, month: int) -> Optional[MonthlyTaxSummary]:
        raw = await self.redis.hgetall(self._key(driver_id, year, month))
        if not raw:
            return None
        return MonthlyTaxSummary(
            driver_id=driver_id,
            period_year=year,
            period_month=month,
            transaction_count=int(raw.get("transaction_count", 0)),
            had_rfc=raw.get("had_rfc") == "1",
            **{field: round2(float(raw.get(field, 0))) for field in self.AMOUNT_FIELDS},
        )
