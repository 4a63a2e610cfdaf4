"""Zone pricing resolution.

Zones are bounding boxes around the metro areas we operate in, each with a
rate card per (service type, vehicle type). When the pickup falls outside
every zone, a state-level row for the service type is tried, and as a last
resort ``DEFAULT_PRICING``.
"""
import logging
from typing import Optional

from toro_mx.core.enums import ServiceType, VehicleType
from toro_mx.core.metrics import pricing_fallbacks
from toro_mx.schemas.quote import PricingConfig, QuoteRequest

logger = logging.getLogger(__name__)

# CDMX rates, Feb 2026
DEFAULT_PRICING = PricingConfig(
    zone_id=0,
    zone_name="Default",
    state_code="MX",
    base_fare=8.00,
    per_km=3.60,
    per_min=1.80,
    min_fare=35.00,
    booking_fee=5.0,
    night_multiplier=1.25,
    weekend_multiplier=1.10,
    max_surge_multiplier=3.00,
    platform_fee_percent=20.00,
    currency="MXN",
)

ZONES = [
    {
        "zone_id": 1,
        "zone_name": "CDMX",
        "state_code": "CDMX",
        "bbox": {"south": 19.04, "north": 19.60, "west": -99.37, "east": -98.94},
        "rates": {
            (ServiceType.RIDE, VehicleType.STANDARD): {
                "base_fare": 8.00, "per_km": 3.60, "per_min": 1.80, "min_fare": 35.00, "booking_fee": 5.0,
            },
            (ServiceType.RIDE, VehicleType.PREMIUM): {
                "base_fare": 15.00, "per_km": 6.20, "per_min": 2.90, "min_fare": 70.00, "booking_fee": 8.0,
            },
            (ServiceType.RIDE, VehicleType.MOTO): {
                "base_fare": 5.00, "per_km": 2.40, "per_min": 1.00, "min_fare": 25.00, "booking_fee": 3.0,
            },
            (ServiceType.DELIVERY, VehicleType.MOTO): {
                "base_fare": 12.00, "per_km": 3.00, "per_min": 1.20, "min_fare": 40.00, "booking_fee": 5.0,
            },
            (ServiceType.CARPOOL, VehicleType.STANDARD): {
                "base_fare": 6.00, "per_km": 2.70, "per_min": 1.35, "min_fare": 28.00, "booking_fee": 4.0,
            },
        },
        "night_multiplier": 1.25,
        "weekend_multiplier": 1.10,
        "max_surge_multiplier": 3.00,
        "platform_fee_percent": 20.00,
    },
    {
        "zone_id": 2,
        "zone_name": "Guadalajara",
        "state_code": "JAL",
        "bbox": {"south": 20.55, "north": 20.80, "west": -103.45, "east": -103.20},
        "rates": {
            (ServiceType.RIDE, VehicleType.STANDARD): {
                "base_fare": 7.00, "per_km": 3.30, "per_min": 1.60, "min_fare": 32.00, "booking_fee": 4.0,
            },
            (ServiceType.RIDE, VehicleType.PREMIUM): {
                "base_fare": 13.00, "per_km": 5.70, "per_min": 2.60, "min_fare": 65.00, "booking_fee": 7.0,
            },
            (ServiceType.DELIVERY, VehicleType.MOTO): {
                "base_fare": 10.00, "per_km": 2.80, "per_min": 1.10, "min_fare": 36.00, "booking_fee": 4.0,
            },
        },
        "night_multiplier": 1.20,
        "weekend_multiplier": 1.10,
        "max_surge_multiplier": 2.50,
        "platform_fee_percent": 20.00,
    },
    {
        "zone_id": 3,
        "zone_name": "Monterrey",
        "state_code": "NL",
        "bbox": {"south": 25.55, "north": 25.80, "west": -100.45, "east": -100.15},
        "rates": {
            (ServiceType.RIDE, VehicleType.STANDARD): {
                "base_fare": 9.00, "per_km": 3.90, "per_min": 1.90, "min_fare": 38.00, "booking_fee": 5.0,
            },
            (ServiceType.RIDE, VehicleType.PREMIUM): {
                "base_fare": 16.00, "per_km": 6.50, "per_min": 3.00, "min_fare": 75.00, "booking_fee": 8.0,
            },
        },
        "night_multiplier": 1.25,
        "weekend_multiplier": 1.15,
        "max_surge_multiplier": 3.00,
        "platform_fee_percent": 22.00,
    },
]

# State-level rows keyed by service type. Missing multipliers fall back
# to the defaults applied in _config_from_state_row.
STATE_PRICING = {
    ServiceType.RIDE: {
        "state_code": "MX", "base_fare": 8.00, "per_km": 3.60, "per_min": 1.80,
        "min_fare": 35.00, "booking_fee": 5.0,
        "night_multiplier": None, "weekend_multiplier": None,
        "max_surge_multiplier": None, "platform_fee_percent": None,
    },
    ServiceType.DELIVERY: {
        "state_code": "MX", "base_fare": 12.00, "per_km": 3.00, "per_min": 1.20,
        "min_fare": 40.00, "booking_fee": None,
        "night_multiplier": 1.15, "weekend_multiplier": None,
        "max_surge_multiplier": 2.00, "platform_fee_percent": 18.00,
    },
}


def _in_bbox(lat: float, lng: float, bbox: dict) -> bool:
    return bbox["south"] <= lat <= bbox["north"] and bbox["west"] <= lng <= bbox["east"]


def resolve_pricing(
    lat: float,
    lng: float,
    service_type: ServiceType,
    vehicle_type: VehicleType,
) -> Optional[PricingConfig]:
    """Zone rate card containing the pickup point, or None."""
    for zone in ZONES:
        if not _in_bbox(lat, lng, zone["bbox"]):
            continue
        rates = zone["rates"].get((ServiceType(service_type), VehicleType(vehicle_type)))
        if rates is None:
            return None
        return PricingConfig(
            zone_id=zone["zone_id"],
            zone_name=zone["zone_name"],
            state_code=zone["state_code"],
            night_multiplier=zone["night_multiplier"],
            weekend_multiplier=zone["weekend_multiplier"],
            max_surge_multiplier=zone["max_surge_multiplier"],
            platform_fee_percent=zone["platform_fee_percent"],
            currency="MXN",
            **rates,
        )
    return None


def _config_from_state_row(row: dict) -> PricingConfig:
    platform_fee = row["platform_fee_percent"]
    return PricingConfig(
        zone_id=0,
        zone_name=row["state_code"],
        state_code=row["state_code"],
        base_fare=row["base_fare"],
        per_km=row["per_km"],
        per_min=row["per_min"],
        min_fare=row["min_fare"],
        booking_fee=row["booking_fee"] or 0.0,
        night_multiplier=row["night_multiplier"] or 1.25,
        weekend_multiplier=row["weekend_multiplier"] or 1.10,
        max_surge_multiplier=row["max_surge_multiplier"] or 2.00,
        platform_fee_percent=platform_fee if platform_fee is not None else 20.00,
        currency="MXN",
    )


def resolve_state_pricing(service_type: ServiceType) -> Optional[PricingConfig]:
    row = STATE_PRICING.get(ServiceType(service_type))
    if row is None:
        return None
    return _config_from_state_row(row)


def pricing_for_request(req: QuoteRequest) -> PricingConfig:
    """Zone card, then state row, then DEFAULT_PRICING. Never None."""
    config = resolve_pricing(req.pickup_lat, req.pickup_lng, req.service_type, req.vehicle_type)
    if config is not None:
        return config

    config = resolve_state_pricing(req.service_type)
    if config is not None:
        logger.info(f"No zone pricing at ({req.pickup_lat}, {req.pickup_lng}); using state row")
        pricing_fallbacks.labels(source="state").inc()
        return config

    logger.warning(f"No pricing configured for {req.service_type}; using defaults")
    pricing_fallbacks.labels(source="default").inc()
    return DEFAULT_PRICING
