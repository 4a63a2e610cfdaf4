from pydantic import BaseModel
from typing import Optional
from toro_mx.core.enums import TransactionType


class TaxRetentionRequest(BaseModel):
    driver_id: str
    gross_amount: float
    country_code: str = "MX"
    rfc: Optional[str] = None
    rfc_validated: bool = False
    ride_id: Optional[str] = None
    delivery_id: Optional[str] = None
    transaction_type: TransactionType = TransactionType.RIDE


class TaxRetention(BaseModel):
    gross_amount: float
    has_rfc: bool
    isr_rate: float
    isr_amount: float
    iva_rate: float
    iva_amount: float
    iva_driver_owes: float
    net_amount: float
    currency: str


class MonthlyTaxSummary(BaseModel):
    driver_id: str
    period_year: int
    period_month: int
    total_gross: float = 0.0
    total_isr_retained: float = 0.0
    total_iva_retained: float = 0.0
    total_iva_driver_owes: float = 0.0
    total_net: float = 0.0
    transaction_count: int = 0
    had_rfc: bool = False
