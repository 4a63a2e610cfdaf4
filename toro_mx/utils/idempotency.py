import json
from typing import Optional
from toro_mx.core.redis import get_redis
from toro_mx.core.config import settings


async def get_idempotent(scope: str, key: Optional[str]) -> Optional[dict]:
    redis = get_redis()
    if not key or redis is None:
        return None
    v = await redis.get(f"idemp:{scope}:{key}")
    return json.loads(v) if v else None


async def set_idempotent(scope: str, key: Optional[str], value: dict) -> None:
    redis = get_redis()
    if not key or redis is None:
        return
    await redis.set(f"idemp:{scope}:{key}", json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
