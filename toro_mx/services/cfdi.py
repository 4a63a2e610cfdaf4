"""CFDI 4.0 generation through a PAC (Facturama), or a mock PAC in development"""
import logging
import time
import uuid

import httpx

from toro_mx.core.config import settings
from toro_mx.core.enums import InvoiceKind
from toro_mx.core.errors import InvalidInput, PacError
from toro_mx.core.metrics import cfdi_results
from toro_mx.schemas.cfdi import CfdiPlatformConfig, CfdiRequest, CfdiResult, PacStamp
from toro_mx.services.pricing import IVA_RATE, round2

logger = logging.getLogger(__name__)

# SAT product catalogue
PRODUCT_CODES = {
    InvoiceKind.RIDE: "78101802",      # Servicios de taxi
    InvoiceKind.DELIVERY: "78102200",  # Servicios de mensajería
}
DESCRIPTIONS = {
    InvoiceKind.RIDE: "Servicio de transporte privado",
    InvoiceKind.DELIVERY: "Servicio de entrega",
}
UNIT_CODE = "E48"
IVA_TAX_CODE = "002"
TAX_OBJECT = "02"

FACTURAMA_URL = "https://api.facturama.mx"
FACTURAMA_SANDBOX_URL = "https://apisandbox.facturama.mx"


def platform_config() -> CfdiPlatformConfig:
    return CfdiPlatformConfig(
        emisor_rfc=settings.CFDI_EMISOR_RFC,
        emisor_nombre=settings.CFDI_EMISOR_NOMBRE,
        emisor_regimen=settings.CFDI_EMISOR_REGIMEN,
        lugar_expedicion=settings.CFDI_LUGAR_EXPEDICION,
        forma_pago=settings.CFDI_FORMA_PAGO,
        metodo_pago=settings.CFDI_METODO_PAGO,
        pac_provider=settings.PAC_PROVIDER,
    )


def build_concepts(
    kind: InvoiceKind,
    reference_id: str,
    subtotal: float,
    pickup: str,
    dropoff: str,
) -> list[dict]:
    return [{
        "ClaveProdServ": PRODUCT_CODES[kind],
        "NoIdentificacion": reference_id,
        "Cantidad": 1,
        "ClaveUnidad": UNIT_CODE,
        "Unidad": "Servicio",
        "Descripcion": f"{DESCRIPTIONS[kind]} - {pickup} a {dropoff}",
        "ValorUnitario": subtotal,
        "Importe": subtotal,
        "ObjetoImp": TAX_OBJECT,
        "Impuestos": {
            "Traslados": [{
                "Base": subtotal,
                "Impuesto": IVA_TAX_CODE,
                "TipoFactor": "Tasa",
                "TasaOCuota": IVA_RATE,
                "Importe": round2(subtotal * IVA_RATE),
            }]
        },
    }]


class MockPac:
    name = "mock"

    async def stamp(self, platform: CfdiPlatformConfig, receptor: dict, concepts: list[dict]) -> PacStamp:
        millis = int(time.time() * 1000)
        return PacStamp(
            uuid=f"MOCK-{millis}-{uuid.uuid4().hex[:9]}".upper(),
            xml_url=f"https://storage.example.com/cfdi/{millis}.xml",
            pdf_url=f"https://storage.example.com/cfdi/{millis}.pdf",
        )


class FacturamaClient:
    name = "facturama"

    def __init__(
        self,
        user: str,
        password: str,
        sandbox: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        self.user = user
        self.password = password
        self.base_url = FACTURAMA_SANDBOX_URL if sandbox else FACTURAMA_URL
        self.client = client

    def _payload(self, platform: CfdiPlatformConfig, receptor: dict, concepts: list[dict]) -> dict:
        return {
            "Serie": "T",
            "Currency": "MXN",
            "ExpeditionPlace": platform.lugar_expedicion,
            "PaymentConditions": "CONTADO",
            "Folio": str(int(time.time() * 1000)),
            "CfdiType": "I",
            "PaymentForm": platform.forma_pago,
            "PaymentMethod": platform.metodo_pago,
            "Receiver": receptor,
            "Items": [
                {
                    "ProductCode": c["ClaveProdServ"],
                    "IdentificationNumber": c["NoIdentificacion"],
                    "Description": c["Descripcion"],
                    "Unit": c["Unidad"],
                    "UnitCode": c["ClaveUnidad"],
                    "UnitPrice": c["ValorUnitario"],
                    "Quantity": c["Cantidad"],
                    "Subtotal": c["Importe"],
                    "TaxObject": c["ObjetoImp"],
                    "Taxes": [
                        {
                            "Total": t["Importe"],
                            "Name": "IVA",
                            "Base": t["Base"],
                            "Rate": t["TasaOCuota"],
                            "IsRetention": False,
                        }
                        for t in c["Impuestos"]["Traslados"]
                    ],
                    "Total": round2(c["Importe"] + c["Impuestos"]["Traslados"][0]["Importe"]),
                }
                for c in concepts
            ],
        }

    async def stamp(self, platform: CfdiPlatformConfig, receptor: dict, concepts: list[dict]) -> PacStamp:
        if not self.user or not self.password:
            raise PacError("Facturama credentials not configured")

        payload = self._payload(platform, receptor, concepts)
        client = self.client or httpx.AsyncClient(timeout=settings.FACTURAMA_TIMEOUT)
        try:
            response = await client.post(
                f"{self.base_url}/3/cfdis",
                json=payload,
                auth=(self.user, self.password),
            )
        except httpx.HTTPError as e:
            raise PacError(f"Facturama error: {e}") from e
        finally:
            if self.client is None:
                await client.aclose()

        if not (200 <= response.status_code < 300):
            raise PacError(f"Facturama error: {response.text}")

        try:
            result = response.json()
        except ValueError as e:
            raise PacError(f"Facturama error: unreadable response: {e}") from e
        if not isinstance(result, dict):
            raise PacError("Facturama error: unexpected response body")

        stamp_uuid = ((result.get("Complement") or {}).get("TaxStamp") or {}).get("Uuid")
        if not stamp_uuid:
            raise PacError("Facturama error: response has no TaxStamp UUID")
        if not result.get("Id"):
            raise PacError("Facturama error: response has no Id")

        return PacStamp(
            uuid=stamp_uuid,
            xml_url=f"{self.base_url}/cfdi/xml/{result['Id']}",
            pdf_url=f"{self.base_url}/cfdi/pdf/{result['Id']}",
        )


def get_pac(provider: str):
    if provider == "facturama":
        return FacturamaClient(
            settings.FACTURAMA_USER,
            settings.FACTURAMA_PASSWORD,
            sandbox=settings.FACTURAMA_SANDBOX,
        )
    return MockPac()


async def generate_cfdi(req: CfdiRequest, platform: CfdiPlatformConfig, pac) -> CfdiResult:
    if req.subtotal <= 0:
        raise InvalidInput("Transaction not found or has no amount")

    subtotal = round2(req.subtotal)
    iva_amount = round2(subtotal * IVA_RATE)
    total = round2(subtotal + iva_amount)
    receptor_rfc = req.receptor_rfc.upper()

    receptor = {
        "Rfc": receptor_rfc,
        "Nombre": req.receptor_nombre,
        "RegimenFiscalReceptor": req.receptor_regimen,
        "DomicilioFiscalReceptor": req.receptor_codigo_postal,
        "UsoCFDI": req.receptor_uso_cfdi,
    }
    concepts = build_concepts(req.kind, req.reference_id, subtotal, req.pickup_address, req.dropoff_address)

    try:
        stamp = await pac.stamp(platform, receptor, concepts)
    except PacError as e:
        logger.error(f"CFDI stamping failed for {req.kind} {req.reference_id}: {e}")
        cfdi_results.labels(provider=pac.name, status="error").inc()
        raise

    cfdi_results.labels(provider=pac.name, status="timbrado").inc()
    logger.info(f"CFDI {stamp.uuid} stamped for {req.kind} {req.reference_id}")

    return CfdiResult(
        uuid_fiscal=stamp.uuid,
        xml_url=stamp.xml_url,
        pdf_url=stamp.pdf_url,
        subtotal=subtotal,
        iva_rate=IVA_RATE,
        iva_amount=iva_amount,
        total=total,
        pac_provider=pac.name,
        receptor_rfc=receptor_rfc,
        emisor_rfc=platform.emisor_rfc,
        reference_id=req.reference_id,
    )
