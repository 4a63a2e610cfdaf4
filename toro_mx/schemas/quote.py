from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from toro_mx.core.enums import ServiceType, VehicleType


class PricingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone_id: int = 0
    zone_name: str = "Default"
    state_code: str = "MX"
    base_fare: float = Field(ge=0)
    per_km: float = Field(ge=0)
    per_min: float = Field(ge=0)
    min_fare: float = Field(ge=0)
    booking_fee: float = Field(default=0.0, ge=0)
    night_multiplier: float = Field(default=1.0, ge=1.0)
    weekend_multiplier: float = Field(default=1.0, ge=1.0)
    max_surge_multiplier: float = Field(default=1.0, ge=1.0)
    platform_fee_percent: float = Field(default=20.0, ge=0, le=100)
    currency: str = "MXN"


class QuoteRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    pickup_lat: float
    pickup_lng: float
    dropoff_lat: Optional[float] = None
    dropoff_lng: Optional[float] = None
    distance_km: float
    duration_min: float
    service_type: ServiceType = ServiceType.RIDE
    vehicle_type: VehicleType = VehicleType.STANDARD
    tolls: float = 0.0
    display_currency: str = "MXN"

    @field_validator("display_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()


class QuoteResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    zone_id: int
    zone_name: str
    currency: str

    base_fare: float
    distance_km: float
    distance_amount: float
    duration_min: float
    time_amount: float
    booking_fee: float

    is_night: bool
    night_multiplier: float
    is_weekend: bool
    weekend_multiplier: float
    surge_multiplier: float
    surge_amount: float

    tolls: float

    subtotal: float
    tax_rate: float
    tax_amount: float
    total: float

    platform_fee: float
    driver_earnings: float

    fx_rate: Optional[float] = None
    total_display: Optional[float] = None
    display_currency: Optional[str] = None

    min_fare_applied: bool
