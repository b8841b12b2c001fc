"""
Shared pytest fixtures: in-memory Redis double + FastAPI TestClient.
"""
import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_reading_provider, get_verification_policy, get_verification_provider
from app.main import app
from app.services.llm import LLMProvider, LLMProviderError, LLMRequest, LLMResponse
from app.services.payments.service import PaymentStore
from app.services.reviews.service import ReviewStore
from app.storage.kv import KVStore, get_kv
from app.verification import get_policy


class FakeRedis:
    """The subset of redis.Redis (decode_responses=True) that KVStore calls."""

    def __init__(self):
        self.values: dict[str, str] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.expiry: dict[str, int] = {}

    def get(self, key):
        return self.values.get(key)

    def set(self, key, value, ex=None, nx=False):
        if nx and key in self.values:
            return None
        self.values[key] = str(value)
        if ex is not None:
            self.expiry[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            if self.zsets.pop(key, None) is not None:
                removed += 1
        return removed

    def zadd(self, name, mapping):
        zset = self.zsets.setdefault(name, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update(mapping)
        return added

    def zrange(self, name, start, end, desc=False):
        items = sorted(self.zsets.get(name, {}).items(), key=lambda kv: (kv[1], kv[0]), reverse=desc)
        members = [member for member, _ in items]
        stop = None if end == -1 else end + 1
        return members[start:stop]

    def zrem(self, name, member):
        return 1 if self.zsets.get(name, {}).pop(member, None) is not None else 0

    def incrby(self, key, amount):
        value = int(self.values.get(key, "0")) + amount
        self.values[key] = str(value)
        return value

    def incr(self, key):
        return self.incrby(key, 1)

    def decrby(self, key, amount):
        return self.incrby(key, -amount)

    def decr(self, key):
        return self.incrby(key, -1)

    def incrbyfloat(self, key, amount):
        value = float(self.values.get(key, "0")) + amount
        self.values[key] = repr(value)
        return value

    def ping(self):
        return True


class FakeProvider(LLMProvider):
    """Returns canned text (or raises) and remembers every request."""

    name = "fake"

    def __init__(self, text: str = "", error: LLMProviderError | None = None, available: bool = True):
        super().__init__({})
        self.text = text
        self.error = error
        self.available = available
        self.requests: list[LLMRequest] = []

    def is_available(self) -> bool:
        return self.available

    def generate(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return LLMResponse(text=self.text, model="fake-model", provider=self.name)


@pytest.fixture()
def redis_double():
    return FakeRedis()


@pytest.fixture()
def kv(redis_double):
    return KVStore(redis_double)


@pytest.fixture()
def payment_store(kv):
    return PaymentStore(kv)


@pytest.fixture()
def review_store(kv):
    return ReviewStore(kv)


@pytest.fixture()
def verification_provider():
    return FakeProvider()


@pytest.fixture()
def reading_provider():
    return FakeProvider(text="🔮 The cards speak")


@pytest.fixture()
def client(kv, verification_provider, reading_provider):
    app.dependency_overrides[get_kv] = lambda: kv
    app.dependency_overrides[get_verification_provider] = lambda: verification_provider
    app.dependency_overrides[get_reading_provider] = lambda: reading_provider
    app.dependency_overrides[get_verification_policy] = lambda: get_policy("strict")
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
