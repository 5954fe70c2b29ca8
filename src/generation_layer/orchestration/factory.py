"""
Component wiring from Settings.

Shared by the API process and the Celery worker so both build the
orchestrator the same way.
"""

from pathlib import Path
from typing import Optional

import structlog

from generation_layer.config import Settings
from generation_layer.fallback.synthesizer import FallbackSynthesizer
from generation_layer.orchestration.orchestrator import Orchestrator
from generation_layer.persistence.base import ArtifactStore
from generation_layer.persistence.memory_store import InMemoryArtifactStore
from generation_layer.persistence.redis_client import RedisClient
from generation_layer.persistence.redis_store import RedisArtifactStore
from generation_layer.provider.base_client import BaseProviderClient
from generation_layer.provider.gemini_client import GeminiClient
from generation_layer.provider.prompt_builder import PromptBuilder
from generation_layer.retry.policy import RetryPolicy
from generation_layer.validation.pipeline import ResponseValidator

logger = structlog.get_logger(__name__)


def build_prompt_builder(settings: Settings) -> PromptBuilder:
    templates_dir = Path(settings.PROMPT_TEMPLATES_DIR) if settings.PROMPT_TEMPLATES_DIR else None
    return PromptBuilder(templates_dir=templates_dir)


def build_provider(settings: Settings) -> BaseProviderClient:
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY not set, every generation will fall back")
    return GeminiClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.PROVIDER_TIMEOUT,
        temperature=settings.PROVIDER_TEMPERATURE,
        max_output_tokens=settings.PROVIDER_MAX_OUTPUT_TOKENS,
    )


def build_store(settings: Settings) -> ArtifactStore:
    backend = settings.STORE_BACKEND.lower()
    if backend == "memory":
        return InMemoryArtifactStore()
    if backend == "redis":
        return RedisArtifactStore(
            RedisClient.get_async_client(settings),
            key_prefix=settings.ARTIFACT_KEY_PREFIX,
            retention_seconds=settings.ARTIFACT_RETENTION_SECONDS,
        )
    raise ValueError(f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}' (expected redis or memory)")


def build_orchestrator(
    settings: Settings,
    provider: Optional[BaseProviderClient] = None,
    store: Optional[ArtifactStore] = None,
) -> Orchestrator:
    """Assemble an Orchestrator; ``provider``/``store`` override the configured ones."""
    validator = ResponseValidator()
    return Orchestrator(
        provider=provider if provider is not None else build_provider(settings),
        store=store if store is not None else build_store(settings),
        validator=validator,
        synthesizer=FallbackSynthesizer(validator, settings.FALLBACK_TTL_SECONDS),
        retry_policy=RetryPolicy.from_settings(settings),
        settings=settings,
    )
