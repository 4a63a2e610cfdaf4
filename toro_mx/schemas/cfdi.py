from pydantic import BaseModel
from typing import Optional
from toro_mx.core.enums import InvoiceKind


class CfdiRequest(BaseModel):
    kind: InvoiceKind = InvoiceKind.RIDE
    reference_id: str
    rider_id: str
    subtotal: float
    pickup_address: str = ""
    dropoff_address: str = ""
    receptor_rfc: str
    receptor_nombre: str
    receptor_regimen: str
    receptor_codigo_postal: str
    receptor_uso_cfdi: str = "G03"


class CfdiPlatformConfig(BaseModel):
    emisor_rfc: str
    emisor_nombre: str
    emisor_regimen: str
    lugar_expedicion: str
    forma_pago: str = "03"
    metodo_pago: str = "PUE"
    pac_provider: str = "mock"


class PacStamp(BaseModel):
    uuid: str
    xml_url: str
    pdf_url: str


class CfdiResult(BaseModel):
    uuid_fiscal: str
    xml_url: str
    pdf_url: str
    subtotal: float
    iva_rate: float
    iva_amount: float
    total: float
    pac_provider: str
    status: str = "timbrado"
    receptor_rfc: str
    emisor_rfc: str
    reference_id: Optional[str] = None
