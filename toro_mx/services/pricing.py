"""Fare quote calculation for Mexican zones.

``compute_quote`` is pure: zone resolution, surge lookup, the wall clock and
the FX rate are all supplied by the caller. The order of the steps below is
part of the contract because every intermediate rounding changes totals.
"""
import math
from datetime import datetime
from typing import Optional

from toro_mx.core.errors import InvalidInput
from toro_mx.schemas.quote import PricingConfig, QuoteRequest, QuoteResult

# IVA, fixed for Mexico; not part of the zone configuration
IVA_RATE = 0.16

NIGHT_START_HOUR = 22
NIGHT_END_HOUR = 6
WEEKEND_DAYS = (5, 6)  # Saturday, Sunday


def round2(value: float) -> float:
    """Round to cents. Python's round() is half-to-even."""
    cents = value * 100
    if not math.isfinite(cents):
        raise InvalidInput(f"amount out of range: {value}")
    return round(cents) / 100


def is_night(now_local: datetime) -> bool:
    return now_local.hour >= NIGHT_START_HOUR or now_local.hour < NIGHT_END_HOUR


def is_weekend(now_local: datetime) -> bool:
    return now_local.weekday() in WEEKEND_DAYS


def _validate(req: QuoteRequest) -> None:
    if not math.isfinite(req.distance_km) or req.distance_km <= 0:
        raise InvalidInput("distance_km must be greater than 0")
    if not math.isfinite(req.duration_min) or req.duration_min <= 0:
        raise InvalidInput("duration_min must be greater than 0")
    if not math.isfinite(req.tolls) or req.tolls < 0:
        raise InvalidInput("tolls must be a non-negative amount")


def compute_quote(
    req: QuoteRequest,
    config: PricingConfig,
    now_local: datetime,
    surge_input: float,
    fx_rate: Optional[float] = None,
) -> QuoteResult:
    """Itemized fare for one trip.

    ``fx_rate`` is the latest stored rate from ``config.currency`` to
    ``req.display_currency``, or None when no rate is available; a missing
    rate only drops ``fx_rate``/``total_display`` from the result.
    """
    _validate(req)

    night = is_night(now_local)
    weekend = is_weekend(now_local)
    night_mult = config.night_multiplier if night else 1.0
    weekend_mult = config.weekend_multiplier if weekend else 1.0

    distance_amount = round2(req.distance_km * config.per_km)
    time_amount = round2(req.duration_min * config.per_min)

    pre_mult_subtotal = config.base_fare + distance_amount + time_amount + config.booking_fee

    # Values below 1.0 pass through uncapped
    capped_surge = min(surge_input, config.max_surge_multiplier)

    after_time_multipliers = pre_mult_subtotal * night_mult * weekend_mult
    subtotal = after_time_multipliers * capped_surge
    surge_amount = subtotal - after_time_multipliers

    subtotal += req.tolls

    # Floor applies after tolls, so tolls are absorbed by the minimum fare
    min_fare_applied = False
    if subtotal < config.min_fare:
        subtotal = config.min_fare
        min_fare_applied = True

    subtotal = round2(subtotal)

    tax_amount = round2(subtotal * IVA_RATE)
    total = round2(subtotal + tax_amount)

    platform_fee = round2(subtotal * config.platform_fee_percent / 100)
    driver_earnings = round2(subtotal - platform_fee)

    display_currency = None
    total_display = None
    if req.display_currency and req.display_currency != config.currency:
        display_currency = req.display_currency
        if fx_rate is not None:
            total_display = round2(total * fx_rate)

    return QuoteResult(
        zone_id=config.zone_id,
        zone_name=config.zone_name,
        currency=config.currency,
        base_fare=config.base_fare,
        distance_km=req.distance_km,
        distance_amount=distance_amount,
        duration_min=req.duration_min,
        time_amount=time_amount,
        booking_fee=config.booking_fee,
        is_night=night,
        night_multiplier=night_mult,
        is_weekend=weekend,
        weekend_multiplier=weekend_mult,
        surge_multiplier=capped_surge,
        surge_amount=surge_amount,
        tolls=req.tolls,
        subtotal=subtotal,
        tax_rate=IVA_RATE,
        tax_amount=tax_amount,
        total=total,
        platform_fee=platform_fee,
        driver_earnings=driver_earnings,
        fx_rate=fx_rate if total_display is not None else None,
        total_display=total_display,
        display_currency=display_currency,
        min_fare_applied=min_fare_applied,
    )
