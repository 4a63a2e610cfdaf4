import hashlib, json

def payload_hash(payload: dict) -> str:
    s = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()


def quote_cache_key(payload: dict, hour: int, weekday: int, surge: float) -> str:
    """Quotes only depend on the clock through the local hour and weekday."""
    return f"quote:{payload_hash({'req': payload, 'hour': hour, 'weekday': weekday, 'surge': surge})}"
