"""Driver onboarding checks: RFC format and required documents.

Messages are shown verbatim in the driver app, hence Spanish.
"""
import logging
import re
from datetime import date, timedelta
from typing import Optional

from toro_mx.core.enums import DocumentStatus, ValidationType
from toro_mx.schemas.driver import (
    DocumentRequirement,
    DriverDocument,
    DriverProfile,
    DriverValidationReport,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Persona física: AAAA######XXX, persona moral: AAA######XXX
RFC_FISICA = re.compile(r"^[A-ZÑ&]{4}[0-9]{6}[A-Z0-9]{3}$")
RFC_MORAL = re.compile(r"^[A-ZÑ&]{3}[0-9]{6}[A-Z0-9]{3}$")

EXPIRY_WARNING_DAYS = 30


def normalize_rfc(rfc: str) -> str:
    return re.sub(r"\s", "", rfc.upper())


def _rfc_error(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, field="rfc", message=message)


def validate_rfc(rfc: Optional[str]) -> ValidationResult:
    if not rfc:
        return _rfc_error("RFC es requerido")

    clean = normalize_rfc(rfc)

    if len(clean) < 12 or len(clean) > 13:
        return _rfc_error("RFC debe tener 12 o 13 caracteres")

    pattern = RFC_FISICA if len(clean) == 13 else RFC_MORAL
    if not pattern.match(clean):
        return _rfc_error("Formato de RFC inválido")

    # YYMMDD follows the name letters
    date_start = 4 if len(clean) == 13 else 3
    month = int(clean[date_start + 2:date_start + 4])
    day = int(clean[date_start + 4:date_start + 6])

    if month < 1 or month > 12:
        return _rfc_error("Mes inválido en RFC")
    if day < 1 or day > 31:
        return _rfc_error("Día inválido en RFC")

    return ValidationResult(is_valid=True, field="rfc", message="RFC válido")


def validate_driver(
    driver: DriverProfile,
    validation_type: ValidationType = ValidationType.ALL,
    documents: Optional[list[DriverDocument]] = None,
    requirements: Optional[list[DocumentRequirement]] = None,
    rfc: Optional[str] = None,
    today: Optional[date] = None,
) -> DriverValidationReport:
    documents = documents or []
    requirements = requirements or []
    today = today or date.today()

    validations: list[ValidationResult] = []
    missing: list[str] = []
    expiring: list[str] = []
    rfc_validated = driver.rfc_validated
    validated_rfc = None

    if validation_type in (ValidationType.RFC, ValidationType.ALL):
        candidate = rfc or driver.rfc
        if candidate:
            result = validate_rfc(candidate)
            validations.append(result)
            if result.is_valid:
                rfc_validated = True
                validated_rfc = normalize_rfc(candidate)
        else:
            validations.append(_rfc_error("RFC no proporcionado"))

    if validation_type in (ValidationType.DOCUMENTS, ValidationType.ALL):
        warn_before = today + timedelta(days=EXPIRY_WARNING_DAYS)
        approved = {
            d.document_type for d in documents
            if d.verification_status == DocumentStatus.APPROVED
        }

        for req in requirements:
            if req.is_required and req.document_type not in approved:
                missing.append(req.document_type)
                validations.append(ValidationResult(
                    is_valid=False,
                    field=req.document_type,
                    message=f"{req.display_name} es requerido",
                ))

        for doc in documents:
            if doc.expiry_date and doc.expiry_date <= warn_before:
                expiring.append(doc.document_type)
                validations.append(ValidationResult(
                    is_valid=True,
                    field=doc.document_type,
                    message=f"{doc.document_type} vence el {doc.expiry_date.isoformat()}",
                ))

        if driver.insurance_expiry:
            if driver.insurance_expiry <= today:
                validations.append(ValidationResult(is_valid=False, field="seguro", message="Seguro vencido"))
                missing.append("seguro")
            elif driver.insurance_expiry <= warn_before:
                expiring.append("seguro")
                validations.append(ValidationResult(
                    is_valid=True,
                    field="seguro",
                    message=f"Seguro vence el {driver.insurance_expiry.isoformat()}",
                ))

        if driver.state_code == "CDMX":
            if driver.semovi_constancia_expiry and driver.semovi_constancia_expiry <= today:
                validations.append(ValidationResult(
                    is_valid=False, field="constanciaSemovi", message="Constancia SEMOVI vencida",
                ))
                missing.append("constanciaSemovi")
            if driver.semovi_vehicular_expiry and driver.semovi_vehicular_expiry <= today:
                validations.append(ValidationResult(
                    is_valid=False, field="constanciaVehicular", message="Constancia Vehicular vencida",
                ))
                missing.append("constanciaVehicular")

    is_complete = not missing and all(v.is_valid for v in validations) and rfc_validated
    logger.info(f"Driver {driver.id} validation ({validation_type}): complete={is_complete}")

    return DriverValidationReport(
        is_complete=is_complete,
        validations=validations,
        missing_documents=missing,
        expiring_soon=expiring,
        rfc_validated=rfc_validated,
        rfc=validated_rfc,
    )
