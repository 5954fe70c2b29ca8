"""Integration test fixtures (service checks and prerequisites).

Redis-backed tests are skipped when no Redis server is reachable on
localhost. API tests run the real FastAPI app with the in-memory store
and a stub provider.
"""

from typing import Optional

import pytest
import pytest_asyncio
from redis.asyncio import Redis as AsyncRedis

from generation_layer.provider.base_client import BaseProviderClient

TEST_REDIS_URL = "redis://localhost:6379/15"


class StubProvider(BaseProviderClient):
    """Provider returning queued outcomes (text or exception), then ``default``."""
    
    def __init__(self, *outcomes, default=None):
        super().__init__(model="stub-model")
        self.outcomes = list(outcomes)
        self.default = default
        self.prompts: list[str] = []
    
    async def generate(self, prompt: str, response_schema: Optional[dict] = None) -> str:
        self.prompts.append(prompt)
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest_asyncio.fixture
async def real_async_redis_client():
    """Real AsyncRedis client on database 15 (the test database).
    
    Skips the test if Redis is not reachable.
    """
    client = AsyncRedis.from_url(TEST_REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        await client.aclose()
        pytest.skip(f"Redis not available: {e}")
    
    # Clear test database before test
    await client.flushdb()
    
    yield client
    
    # Clear test database after test
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def integration_settings(test_settings):
    """Settings for integration tests with real services."""
    test_settings.REDIS_URL = TEST_REDIS_URL
    test_settings.STORE_BACKEND = "redis"
    test_settings.PROMETHEUS_ENABLED = False
    return test_settings


@pytest.fixture
def stub_provider():
    """Factory: stub_provider(*outcomes, default=None) -> StubProvider."""
    return StubProvider
