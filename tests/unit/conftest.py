"""Unit test fixtures (fakes and stubs).

Provides a scripted provider, an in-memory store and an orchestrator
factory so tests run without network or Redis.
"""

import asyncio
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from generation_layer.fallback.synthesizer import FallbackSynthesizer
from generation_layer.orchestration.orchestrator import Orchestrator
from generation_layer.persistence.memory_store import InMemoryArtifactStore
from generation_layer.provider.base_client import BaseProviderClient
from generation_layer.retry.policy import RetryPolicy
from generation_layer.validation.pipeline import ResponseValidator


class ScriptedProvider(BaseProviderClient):
    """Provider that replays scripted outcomes.
    
    Each outcome is either response text or an exception instance to
    raise. When the script runs out, ``default`` is used. An optional
    gate (asyncio.Event) holds every call until it is set.
    """
    
    def __init__(self, outcomes: Optional[list] = None, default: Any = None, gate=None):
        super().__init__(model="fake-model")
        self.outcomes = list(outcomes or [])
        self.default = default
        self.gate = gate
        self.calls: list[str] = []
    
    async def generate(self, prompt: str, response_schema=None) -> str:
        self.calls.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0) if self.outcomes else self.default
        if isinstance(outcome, BaseException):
            raise outcome
        if outcome is None:
            raise AssertionError("ScriptedProvider has no outcome left")
        return outcome
    
    @property
    def call_count(self) -> int:
        return len(self.calls)


@pytest.fixture
def memory_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def mock_sleep() -> AsyncMock:
    """Replaces asyncio.sleep in retry policies (records backoff delays)."""
    return AsyncMock(return_value=None)


@pytest.fixture
def make_orchestrator(test_settings, memory_store, mock_sleep, clock):
    """Factory: make_orchestrator(provider, store=None) -> Orchestrator."""
    
    def factory(provider: BaseProviderClient, store=None, settings=None) -> Orchestrator:
        settings = settings or test_settings
        validator = ResponseValidator()
        return Orchestrator(
            provider=provider,
            store=store if store is not None else memory_store,
            validator=validator,
            synthesizer=FallbackSynthesizer(validator, settings.FALLBACK_TTL_SECONDS),
            retry_policy=RetryPolicy(
                max_attempts=settings.MAX_ATTEMPTS,
                base_delay=settings.RETRY_BASE_DELAY,
                multiplier=settings.RETRY_MULTIPLIER,
                jitter=settings.RETRY_JITTER,
                sleep=mock_sleep,
            ),
            settings=settings,
            clock=clock,
        )
    
    return factory


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests."""
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=None)
    mock.mget = AsyncMock(return_value=[])
    mock.zrangebyscore = AsyncMock(return_value=[])
    mock.zrem = AsyncMock(return_value=1)
    mock.ping = AsyncMock(return_value=True)
    return mock


@pytest.fixture
def make_provider():
    """Factory: make_provider(*outcomes, default=None, gate=None) -> ScriptedProvider."""
    
    def factory(*outcomes, default=None, gate=None) -> ScriptedProvider:
        return ScriptedProvider(list(outcomes), default=default, gate=gate)
    
    return factory
