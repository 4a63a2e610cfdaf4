import pytest
from datetime import datetime

from toro_mx.core.errors import InvalidInput
from toro_mx.services.tax import MX_RETENTION_RATES, TaxLedger, compute_retention


@pytest.mark.tax
class TestRetention:

    def test_driver_with_rfc(self):
        res = compute_retention(250.0, "MX", has_rfc=True)

        assert res.has_rfc is True
        assert res.isr_rate == 0.025
        assert res.isr_amount == 6.25
        assert res.iva_rate == 0.08
        assert res.iva_amount == 20.0
        assert res.iva_driver_owes == 20.0
        assert res.net_amount == 223.75
        assert res.currency == "MXN"

    def test_driver_without_rfc(self):
        res = compute_retention(250.0, "MX", has_rfc=False)

        assert res.isr_rate == 0.20
        assert res.isr_amount == 50.0
        assert res.iva_amount == 20.0
        assert res.net_amount == 180.0

    def test_rates_override(self):
        res = compute_retention(100.0, "MX", has_rfc=True, rates={"isr_rate_with_rfc": 0.01})

        assert res.isr_amount == 1.0
        assert res.iva_rate == MX_RETENTION_RATES["iva_retention_rate"]

    @pytest.mark.parametrize("country,currency", [("US", "USD"), ("CO", "USD")])
    def test_outside_mexico_passes_through(self, country, currency):
        res = compute_retention(99.9, country, has_rfc=True)

        assert res.has_rfc is False
        assert res.isr_amount == 0.0
        assert res.iva_amount == 0.0
        assert res.net_amount == 99.9
        assert res.currency == currency

    @pytest.mark.parametrize("gross", [0.0, -10.0])
    def test_non_positive_gross(self, gross):
        with pytest.raises(InvalidInput):
            compute_retention(gross, "MX", has_rfc=True)


@pytest.mark.tax
class TestTaxLedger:

    async def test_monthly_accumulation(self, fake_redis):
        ledger = TaxLedger(fake_redis)
        when = datetime(2026, 10, 14, 12, 0)

        await ledger.record("drv-1", compute_retention(250.0, "MX", has_rfc=True), when)
        summary = await ledger.record("drv-1", compute_retention(100.0, "MX", has_rfc=True), when)

        assert summary.transaction_count == 2
        assert summary.total_gross == 350.0
        assert summary.total_isr_retained == 8.75
        assert summary.total_iva_retained == 28.0
        assert summary.total_iva_driver_owes == 28.0
        assert summary.total_net == 313.25
        assert summary.had_rfc is True

    async def test_had_rfc_tracks_latest(self, fake_redis):
        ledger = TaxLedger(fake_redis)
        when = datetime(2026, 10, 14, 12, 0)

        await ledger.record("drv-2", compute_retention(100.0, "MX", has_rfc=True), when)
        summary = await ledger.record("drv-2", compute_retention(100.0, "MX", has_rfc=False), when)

        assert summary.had_rfc is False

    async def test_months_are_separate(self, fake_redis):
        ledger = TaxLedger(fake_redis)
        await ledger.record("drv-3", compute_retention(100.0, "MX", has_rfc=True), datetime(2026, 9, 30, 23, 0))
        await ledger.record("drv-3", compute_retention(200.0, "MX", has_rfc=True), datetime(2026, 10, 1, 0, 30))

        september = await ledger.monthly_summary("drv-3", 2026, 9)
        october = await ledger.monthly_summary("drv-3", 2026, 10)

        assert september.total_gross == 100.0
        assert october.total_gross == 200.0
        assert september.transaction_count == october.transaction_count == 1

    async def test_empty_period(self, fake_redis):
        assert await TaxLedger(fake_redis).monthly_summary("nobody", 2026, 1) is None
