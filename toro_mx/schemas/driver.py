from pydantic import BaseModel, Field
from typing import Optional
from datetime import date
from toro_mx.core.enums import DocumentStatus, ValidationType


class ValidationResult(BaseModel):
    is_valid: bool
    field: str
    message: str


class DriverProfile(BaseModel):
    id: str
    country_code: str = "MX"
    state_code: Optional[str] = None
    rfc: Optional[str] = None
    rfc_validated: bool = False
    insurance_expiry: Optional[date] = None
    semovi_constancia_expiry: Optional[date] = None
    semovi_vehicular_expiry: Optional[date] = None


class DriverDocument(BaseModel):
    document_type: str
    verification_status: DocumentStatus = DocumentStatus.PENDING
    expiry_date: Optional[date] = None


class DocumentRequirement(BaseModel):
    document_type: str
    display_name: str
    is_required: bool = True


class DriverValidationRequest(BaseModel):
    driver: DriverProfile
    validation_type: ValidationType = ValidationType.ALL
    rfc: Optional[str] = None
    documents: list[DriverDocument] = Field(default_factory=list)
    requirements: list[DocumentRequirement] = Field(default_factory=list)


class DriverValidationReport(BaseModel):
    is_complete: bool
    validations: list[ValidationResult]
    missing_documents: list[str]
    expiring_soon: list[str]
    rfc_validated: bool
    rfc: Optional[str] = None
