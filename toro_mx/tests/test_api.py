import json
import pytest
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from toro_mx.schemas.fx import FxRate
from toro_mx.services.fx import FxRateStore

SATURDAY_NIGHT = datetime(2026, 10, 17, 23, 0, tzinfo=ZoneInfo("America/Mexico_City"))


async def store_rate(redis, quote: str, rate: float):
    await FxRateStore(redis).add_rate(FxRate(
        base="MXN",
        quote=quote,
        rate=rate,
        source="exchangerate-api-v4",
        fetched_at=datetime(2026, 10, 14, 11, 0, tzinfo=timezone.utc),
    ))


@pytest.mark.api
class TestMonitoring:

    async def test_health(self, test_client, no_redis):
        response = await test_client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["redis"] == "disconnected"

    async def test_readiness_without_redis(self, test_client, no_redis):
        response = await test_client.get("/readiness")

        assert response.status_code == 503
        assert response.json()["ready"] is False

    async def test_readiness_with_redis(self, test_client, fake_redis):
        response = await test_client.get("/readiness")

        assert response.status_code == 200
        assert response.json()["ready"] is True

    async def test_metrics(self, test_client, no_redis):
        await test_client.get("/health")
        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text

    async def test_root(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json()["docs"] == "/docs"


@pytest.mark.api
@pytest.mark.pricing
class TestQuoteEndpoint:

    async def test_cdmx_quote(self, test_client, no_redis, valid_quote_data):
        response = await test_client.post("/quotes/calc", json=valid_quote_data)

        assert response.status_code == 200
        data = response.json()
        assert data["zone_name"] == "CDMX"
        assert data["currency"] == "MXN"
        # 8 + 36 + 36 + 5 booking
        assert data["subtotal"] == 85.0
        assert data["tax_amount"] == 13.6
        assert data["total"] == 98.6
        assert data["platform_fee"] == 17.0
        assert data["driver_earnings"] == 68.0
        assert data["min_fare_applied"] is False
        assert "fx_rate" not in data
        assert "total_display" not in data
        assert "display_currency" not in data

    async def test_clock_drives_multipliers(self, test_client, pinned_clock, no_redis, valid_quote_data):
        pinned_clock(SATURDAY_NIGHT)
        response = await test_client.post("/quotes/calc", json=valid_quote_data)

        data = response.json()
        assert data["is_night"] is True
        assert data["is_weekend"] is True
        assert data["night_multiplier"] == 1.25
        assert data["weekend_multiplier"] == 1.1
        # 85 * 1.375 = 116.875
        assert data["subtotal"] == pytest.approx(116.88)

    async def test_display_currency_without_rate(self, test_client, fake_redis, valid_quote_data):
        response = await test_client.post("/quotes/calc", json={**valid_quote_data, "display_currency": "EUR"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 98.6
        assert data["display_currency"] == "EUR"
        assert "fx_rate" not in data
        assert "total_display" not in data

    async def test_display_currency_with_rate(self, test_client, fake_redis, valid_quote_data):
        await store_rate(fake_redis, "USD", 0.05)
        response = await test_client.post("/quotes/calc", json={**valid_quote_data, "display_currency": "USD"})

        data = response.json()
        assert data["fx_rate"] == 0.05
        assert data["total_display"] == 4.93
        assert data["display_currency"] == "USD"

    async def test_lowercase_display_currency(self, test_client, fake_redis, valid_quote_data):
        await store_rate(fake_redis, "USD", 0.05)
        response = await test_client.post("/quotes/calc", json={**valid_quote_data, "display_currency": "usd"})

        data = response.json()
        assert data["display_currency"] == "USD"
        assert data["total_display"] == 4.93

    async def test_quote_is_cached(self, test_client, fake_redis, valid_quote_data):
        first = await test_client.post("/quotes/calc", json=valid_quote_data)
        cached_keys = [k for k in fake_redis.values if k.startswith("quote:")]
        second = await test_client.post("/quotes/calc", json=valid_quote_data)

        assert len(cached_keys) == 1
        assert first.json() == second.json()

    async def test_cache_key_includes_clock(self, test_client, pinned_clock, fake_redis, valid_quote_data):
        day = await test_client.post("/quotes/calc", json=valid_quote_data)
        pinned_clock(SATURDAY_NIGHT)
        night = await test_client.post("/quotes/calc", json=valid_quote_data)

        assert len([k for k in fake_redis.values if k.startswith("quote:")]) == 2
        assert day.json()["subtotal"] != night.json()["subtotal"]

    async def test_outside_zones_uses_fallback(self, test_client, no_redis, valid_quote_data):
        payload = {**valid_quote_data, "pickup_lat": 21.1619, "pickup_lng": -86.8515}
        response = await test_client.post("/quotes/calc", json=payload)

        assert response.status_code == 200
        assert response.json()["zone_id"] == 0

    @pytest.mark.parametrize("overrides", [
        {"distance_km": 0},
        {"duration_min": -2},
        {"tolls": -1},
        {"distance_km": 1e307},
    ])
    async def test_invalid_input(self, test_client, no_redis, valid_quote_data, overrides):
        response = await test_client.post("/quotes/calc", json={**valid_quote_data, **overrides})

        assert response.status_code == 400

    @pytest.mark.parametrize("field,value", [
        ("distance_km", float("nan")),
        ("duration_min", float("inf")),
        ("tolls", float("nan")),
    ])
    async def test_non_finite_input(self, test_client, no_redis, valid_quote_data, field, value):
        body = json.dumps({**valid_quote_data, field: value})
        response = await test_client.post(
            "/quotes/calc", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    async def test_missing_required_field(self, test_client, no_redis, valid_quote_data):
        payload = dict(valid_quote_data)
        del payload["pickup_lat"]
        response = await test_client.post("/quotes/calc", json=payload)

        assert response.status_code == 422


@pytest.mark.api
@pytest.mark.fx
class TestFxEndpoints:

    async def test_latest_rate(self, test_client, fake_redis):
        await store_rate(fake_redis, "EUR", 0.0537)
        response = await test_client.get("/fx/rates/MXN/EUR")

        assert response.status_code == 200
        assert response.json()["rate"] == 0.0537

    async def test_missing_rate(self, test_client, fake_redis):
        response = await test_client.get("/fx/rates/MXN/EUR")

        assert response.status_code == 404

    async def test_store_unavailable(self, test_client, no_redis):
        response = await test_client.get("/fx/rates/MXN/EUR")

        assert response.status_code == 503


@pytest.mark.api
@pytest.mark.tax
class TestTaxEndpoints:

    async def test_retention_recorded(self, test_client, fake_redis):
        payload = {
            "driver_id": "drv-1",
            "gross_amount": 250.0,
            "rfc": "GODE561231GR8",
            "rfc_validated": True,
            "ride_id": "ride-1",
        }
        response = await test_client.post("/tax/retention", json=payload)

        assert response.status_code == 200
        assert response.json()["isr_amount"] == 6.25
        assert response.json()["net_amount"] == 223.75

        summary = await test_client.get("/tax/summary/drv-1/2026/10")
        assert summary.status_code == 200
        assert summary.json()["transaction_count"] == 1
        assert summary.json()["total_gross"] == 250.0

    async def test_unvalidated_rfc_pays_higher_isr(self, test_client, no_redis):
        payload = {"driver_id": "drv-2", "gross_amount": 100.0, "rfc": "GODE561231GR8", "rfc_validated": False}
        response = await test_client.post("/tax/retention", json=payload)

        assert response.json()["has_rfc"] is False
        assert response.json()["isr_amount"] == 20.0

    async def test_non_mx_driver(self, test_client, fake_redis):
        payload = {"driver_id": "drv-3", "gross_amount": 40.0, "country_code": "US"}
        response = await test_client.post("/tax/retention", json=payload)

        assert response.json()["net_amount"] == 40.0
        assert response.json()["currency"] == "USD"
        assert (await test_client.get("/tax/summary/drv-3/2026/10")).status_code == 404

    async def test_invalid_gross(self, test_client, no_redis):
        response = await test_client.post("/tax/retention", json={"driver_id": "drv-4", "gross_amount": 0})

        assert response.status_code == 400


@pytest.mark.api
@pytest.mark.drivers
class TestDriverEndpoint:

    async def test_validate(self, test_client):
        payload = {
            "driver": {"id": "drv-1", "state_code": "CDMX"},
            "validation_type": "all",
            "rfc": "GODE561231GR8",
            "documents": [{"document_type": "ine", "verification_status": "approved"}],
            "requirements": [
                {"document_type": "ine", "display_name": "INE"},
                {"document_type": "licencia", "display_name": "Licencia de conducir"},
            ],
        }
        response = await test_client.post("/drivers/validate", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["rfc_validated"] is True
        assert data["rfc"] == "GODE561231GR8"
        assert data["missing_documents"] == ["licencia"]
        assert data["is_complete"] is False


@pytest.mark.api
@pytest.mark.cfdi
class TestCfdiEndpoint:

    payload = {
        "kind": "delivery",
        "reference_id": "dlv-7",
        "rider_id": "rider-1",
        "subtotal": 80.0,
        "receptor_rfc": "GODE561231GR8",
        "receptor_nombre": "EDUARDO GOMEZ DIAZ",
        "receptor_regimen": "612",
        "receptor_codigo_postal": "11560",
    }

    async def test_create(self, test_client, no_redis):
        response = await test_client.post("/cfdi", json=self.payload)

        assert response.status_code == 200
        data = response.json()
        assert data["uuid_fiscal"].startswith("MOCK-")
        assert data["total"] == 92.8

    @pytest.mark.idempotency
    async def test_idempotent_replay(self, test_client, fake_redis):
        headers = {"Idempotency-Key": "inv-001"}
        first = await test_client.post("/cfdi", json=self.payload, headers=headers)
        second = await test_client.post("/cfdi", json=self.payload, headers=headers)

        assert first.json()["uuid_fiscal"] == second.json()["uuid_fiscal"]
        assert "idemp:cfdi:inv-001" in fake_redis.values

    async def test_no_amount(self, test_client, no_redis):
        response = await test_client.post("/cfdi", json={**self.payload, "subtotal": 0})

        assert response.status_code == 400

    async def test_pac_failure(self, test_client, no_redis, monkeypatch):
        from toro_mx.core.config import settings
        monkeypatch.setattr(settings, "PAC_PROVIDER", "facturama")
        monkeypatch.setattr(settings, "FACTURAMA_USER", "")

        response = await test_client.post("/cfdi", json=self.payload)

        assert response.status_code == 502
