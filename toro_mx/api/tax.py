"""ISR/IVA retention endpoints"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException

from toro_mx.core.errors import InvalidInput
from toro_mx.core.redis import get_redis
from toro_mx.schemas.tax import MonthlyTaxSummary, TaxRetention, TaxRetentionRequest
from toro_mx.services.tax import TaxLedger, compute_retention
from toro_mx.utils.clock import get_local_now

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tax", tags=["tax"])


@router.post("/retention", response_model=TaxRetention)
async def calculate_retention(req: TaxRetentionRequest, now_local: datetime = Depends(get_local_now)):

    has_rfc = bool(req.rfc) and req.rfc_validated
    try:
        retention = compute_retention(req.gross_amount, req.country_code, has_rfc)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))

    if req.country_code != "MX":
        return retention

    redis = get_redis()
    if redis is None:
        logger.warning(f"Ledger unavailable; retention for driver {req.driver_id} not recorded")
        return retention

    try:
        await TaxLedger(redis).record(req.driver_id, retention, now_local)
    except Exception as e:
        logger.error(f"Error recording retention for driver {req.driver_id}: {e}")

    return retention


@router.get("/summary/{driver_id}/{year}/{month}", response_model=MonthlyTaxSummary)
async def monthly_summary(driver_id: str, year: int, month: int):
    redis = get_redis()
    if redis is None:
        raise HTTPException(status_code=503, detail="Ledger not available")

    summary = await TaxLedger(redis).monthly_summary(driver_id, year, month)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"No retentions for {driver_id} in {year}-{month:02d}")
    return summary
