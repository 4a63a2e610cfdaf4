"""CFDI invoice endpoint, idempotent on the Idempotency-Key header"""
import logging
from typing import Optional
from fastapi import APIRouter, Header, HTTPException

from toro_mx.core.errors import InvalidInput, PacError
from toro_mx.schemas.cfdi import CfdiRequest, CfdiResult
from toro_mx.services.cfdi import generate_cfdi, get_pac, platform_config
from toro_mx.utils.idempotency import get_idempotent, set_idempotent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/cfdi", tags=["cfdi"])


@router.post("", response_model=CfdiResult)
async def create_cfdi(req: CfdiRequest, idempotency_key: Optional[str] = Header(default=None)):

    try:
        previous = await get_idempotent("cfdi", idempotency_key)
    except Exception as e:
        logger.warning(f"Idempotency lookup failed: {e}")
        previous = None
    if previous:
        return CfdiResult.model_validate(previous)

    platform = platform_config()
    try:
        result = await generate_cfdi(req, platform, get_pac(platform.pac_provider))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PacError as e:
        raise HTTPException(status_code=502, detail=str(e))

    try:
        await set_idempotent("cfdi", idempotency_key, result.model_dump(mode="json"))
    except Exception as e:
        logger.warning(f"Idempotency write failed: {e}")

    return result
