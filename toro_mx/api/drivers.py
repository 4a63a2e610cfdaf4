from fastapi import APIRouter

from toro_mx.schemas.driver import DriverValidationReport, DriverValidationRequest
from toro_mx.services.drivers import validate_driver

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.post("/validate", response_model=DriverValidationReport)
async def validate(req: DriverValidationRequest):
    return validate_driver(
        req.driver,
        req.validation_type,
        documents=req.documents,
        requirements=req.requirements,
        rfc=req.rfc,
    )
