"""
Key-value store adapter over Redis (works with hosted Redis-compatible KV).
Records are stored as JSON strings; recency indexes are sorted sets.
"""
import functools
import json
from typing import Any

import redis

from app.core.config import settings


class KVStore:
    """Thin wrapper: JSON (de)serialization plus the handful of commands the services use."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    # ----- plain values -----

    def get(self, key: str) -> str | None:
        return self.client.get(key)

    def set(self, key: str, value: str, ex: int | None = None, nx: bool = False) -> bool:
        """SET with optional TTL; with nx=True returns False when the key already exists."""
        return bool(self.client.set(key, value, ex=ex, nx=nx))

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(self.client.delete(*keys))

    # ----- JSON records -----

    def get_json(self, key: str) -> Any:
        raw = self.client.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            return None

    def set_json(self, key: str, value: Any, ex: int | None = None, nx: bool = False) -> bool:
        return self.set(key, json.dumps(value, ensure_ascii=False), ex=ex, nx=nx)

    # ----- sorted sets (recency index) -----

    def zadd(self, name: str, score: float, member: str) -> int:
        return int(self.client.zadd(name, {member: score}))

    def zrange(self, name: str, start: int = 0, end: int = -1, desc: bool = False) -> list[str]:
        return list(self.client.zrange(name, start, end, desc=desc))

    def zrem(self, name: str, member: str) -> int:
        return int(self.client.zrem(name, member))

    # ----- counters -----

    def incr(self, key: str) -> int:
        return int(self.client.incr(key))

    def decr(self, key: str) -> int:
        return int(self.client.decr(key))

    def incrby(self, key: str, amount: int) -> int:
        return int(self.client.incrby(key, amount))

    def decrby(self, key: str, amount: int) -> int:
        return int(self.client.decrby(key, amount))

    def incrbyfloat(self, key: str, amount: float) -> float:
        return float(self.client.incrbyfloat(key, amount))

    def get_number(self, key: str) -> float:
        """Counter value; 0 when missing or garbage."""
        raw = self.client.get(key)
        if raw is None:
            return 0
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return 0
        return int(number) if number.is_integer() else number

    def ping(self) -> bool:
        return bool(self.client.ping())


@functools.lru_cache(maxsize=1)
def _redis_client() -> redis.Redis:
    return redis.Redis.from_url(settings.redis_url, decode_responses=True)


def get_kv() -> KVStore:
    """FastAPI dependency: store bound to the process-wide connection pool."""
    return KVStore(_redis_client())
