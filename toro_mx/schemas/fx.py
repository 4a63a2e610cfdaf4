from pydantic import BaseModel
from datetime import datetime


class FxRate(BaseModel):
    base: str
    quote: str
    rate: float
    source: str
    fetched_at: datetime


class FxPair(BaseModel):
    base: str
    quote: str
    rate: float


class FxRefreshResult(BaseModel):
    rates_updated: int
    rates: list[FxPair]
    source: str
    timestamp: datetime
