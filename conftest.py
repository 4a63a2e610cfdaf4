import pytest
from datetime import datetime
from zoneinfo import ZoneInfo
from httpx import AsyncClient, ASGITransport

from toro_mx.main import app
from toro_mx.core.redis import set_redis
from toro_mx.schemas.quote import PricingConfig
from toro_mx.utils.clock import get_local_now

MX_TZ = ZoneInfo("America/Mexico_City")

# Wednesday
WEEKDAY_NOON = datetime(2026, 10, 14, 12, 0, tzinfo=MX_TZ)


class FakePipeline:
    def __init__(self, redis):
        self.redis = redis
        self.calls = []

    def __getattr__(self, name):
        method = getattr(self.redis, name)

        def queue(*args, **kwargs):
            self.calls.append((method, args, kwargs))
            return self
        return queue

    async def execute(self):
        results = []
        for method, args, kwargs in self.calls:
            results.append(await method(*args, **kwargs))
        self.calls = []
        return results


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis(decode_responses=True)."""

    def __init__(self):
        self.values = {}
        self.lists = {}
        self.hashes = {}
        self.expiry = {}

    async def ping(self):
        return True

    async def aclose(self):
        pass

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value, ex=None):
        self.values[key] = str(value)
        if ex is not None:
            self.expiry[key] = ex
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            for store in (self.values, self.lists, self.hashes):
                if key in store:
                    del store[key]
                    removed += 1
        return removed

    async def lpush(self, key, *values):
        items = self.lists.setdefault(key, [])
        for value in values:
            items.insert(0, str(value))
        return len(items)

    async def lindex(self, key, index):
        items = self.lists.get(key, [])
        try:
            return items[index]
        except IndexError:
            return None

    async def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        end = len(items) if end == -1 else end + 1
        return items[start:end]

    async def ltrim(self, key, start, end):
        items = self.lists.get(key, [])
        end = len(items) if end == -1 else end + 1
        self.lists[key] = items[start:end]
        return True

    async def hincrbyfloat(self, key, field, amount):
        h = self.hashes.setdefault(key, {})
        value = float(h.get(field, 0)) + float(amount)
        h[field] = repr(value)
        return value

    async def hincrby(self, key, field, amount):
        h = self.hashes.setdefault(key, {})
        value = int(h.get(field, 0)) + int(amount)
        h[field] = str(value)
        return value

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = str(value)
        return 1

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    def pipeline(self):
        return FakePipeline(self)


@pytest.fixture
def fake_redis():
    redis = FakeRedis()
    set_redis(redis)
    yield redis
    set_redis(None)


@pytest.fixture
def no_redis():
    set_redis(None)
    yield
    set_redis(None)


@pytest.fixture
def pinned_clock():
    def _pin(moment: datetime = WEEKDAY_NOON):
        app.dependency_overrides[get_local_now] = lambda: moment
        return moment

    _pin()
    yield _pin
    app.dependency_overrides.pop(get_local_now, None)


@pytest.fixture
async def test_client(pinned_clock):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def cdmx_config():
    """CDMX standard rates without booking fee, so pre-multiplier totals are round numbers."""
    return PricingConfig(
        zone_id=1,
        zone_name="CDMX",
        state_code="CDMX",
        base_fare=8.00,
        per_km=3.60,
        per_min=1.80,
        min_fare=35.00,
        booking_fee=0.0,
        night_multiplier=1.25,
        weekend_multiplier=1.10,
        max_surge_multiplier=3.00,
        platform_fee_percent=20.00,
        currency="MXN",
    )


@pytest.fixture
def valid_quote_data():
    return {
        "pickup_lat": 19.4326,
        "pickup_lng": -99.1332,
        "dropoff_lat": 19.3600,
        "dropoff_lng": -99.1800,
        "distance_km": 10.0,
        "duration_min": 20.0,
    }


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "fx: marks tests related to exchange rates"
    )
    config.addinivalue_line(
        "markers", "tax: marks tests related to tax retention"
    )
    config.addinivalue_line(
        "markers", "drivers: marks tests related to driver validation"
    )
    config.addinivalue_line(
        "markers", "cfdi: marks tests related to invoicing"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP layer"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
