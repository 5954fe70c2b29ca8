"""
Orchestrator: cache-aside generation with single-flight de-duplication.

obtain(key, request):
    1. Store lookup. A servable artifact (now < next_refresh_at) is
       returned as-is; fallback artifacts included.
    2. Otherwise attach to the key's in-flight generation, or start one.
       The generation task re-reads the store (double-checked lookup),
       then runs up to VALIDATION_ATTEMPTS rounds of
       retry(generate) -> validate. Success is persisted as ``fresh``.
    3. When generation is unusable: the previous generated artifact is
       served as ``stale`` (SERVE_STALE_ON_FAILURE), otherwise a
       synthesized ``fallback`` artifact is persisted and returned.

Each caller waits at most its deadline. A caller that gives up receives
stale or (unpersisted) fallback content while the generation keeps
running in the background and populates the store for later callers.

Provider and validation errors never reach the caller. StoreError and
invalid input (InvalidKeyError, InvalidRequestError) do.
"""

import asyncio
import time
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

import structlog

from generation_layer.config import Settings
from generation_layer.models.artifact import Artifact, utcnow
from generation_layer.models.enums import ArtifactStatus, ProviderErrorKind
from generation_layer.models.request import GenerationRequest
from generation_layer.monitoring.metrics import (
    artifacts_produced_total,
    cache_lookups_total,
    single_flight_joins_total,
    waiter_deadline_exceeded_total,
)
from generation_layer.orchestration.exceptions import InvalidKeyError, InvalidRequestError
from generation_layer.orchestration.single_flight import SingleFlight
from generation_layer.persistence.base import ArtifactStore
from generation_layer.provider.base_client import BaseProviderClient
from generation_layer.provider.exceptions import ProviderError
from generation_layer.retry.exceptions import RetryExhausted
from generation_layer.retry.policy import RetryPolicy
from generation_layer.validation.exceptions import ValidationError
from generation_layer.validation.pipeline import ResponseValidator

if TYPE_CHECKING:
    from generation_layer.fallback.synthesizer import FallbackSynthesizer

logger = structlog.get_logger(__name__)

MAX_KEY_LENGTH = 256


class Orchestrator:
    """
    Single entry point for obtaining generated content.
    
    One instance is shared by all concurrent callers of a process.
    
    Attributes:
        provider: Single-attempt provider client
        store: Artifact persistence
        validator: Raw text -> schema-valid payload
        synthesizer: Fallback artifact factory
        retry_policy: Backoff/retry around provider calls
        settings: TTLs, deadlines and degradation switches
    """
    
    def __init__(
        self,
        provider: BaseProviderClient,
        store: ArtifactStore,
        validator: ResponseValidator,
        synthesizer: "FallbackSynthesizer",
        retry_policy: RetryPolicy,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.provider = provider
        self.store = store
        self.validator = validator
        self.synthesizer = synthesizer
        self.retry_policy = retry_policy
        self.settings = settings
        self._clock = clock
        self._flights = SingleFlight()
        
        logger.info(
            "Orchestrator initialized",
            provider=repr(provider),
            store=type(store).__name__,
            max_attempts=retry_policy.max_attempts,
            validation_attempts=settings.VALIDATION_ATTEMPTS,
            serve_stale_on_failure=settings.SERVE_STALE_ON_FAILURE,
            stale_while_revalidate_seconds=settings.STALE_WHILE_REVALIDATE_SECONDS,
        )
    
    # === Public API ===
    
    async def obtain(self, key: str, request: GenerationRequest) -> Artifact:
        """
        Return content for ``key``, generating it if needed.
        
        Raises:
            InvalidKeyError: Empty, blank or over-long key
            InvalidRequestError: Malformed request or broken fallback policy
            StoreError: The artifact store is unreachable
        """
        self._check_input(key, request)
        schema_name = request.schema_name
        now = self._clock()
        
        cached = await self.store.find(key)
        if cached is not None and cached.is_servable(now):
            cache_lookups_total.labels(schema=schema_name, outcome="hit").inc()
            logger.debug("Cache hit", key=key, status=cached.status.value)
            return cached
        
        cache_lookups_total.labels(
            schema=schema_name, outcome="stale" if cached is not None else "miss"
        ).inc()
        
        if cached is not None and self._within_revalidate_window(cached, now):
            flight, started = self._flights.join_or_start(
                key, lambda: self._generate(key, request, cached)
            )
            logger.info(
                "Serving stale artifact while revalidating",
                key=key,
                revalidation_started=started,
            )
            return cached.as_observed(now)
        
        flight, started = self._flights.join_or_start(
            key, lambda: self._generate(key, request, cached)
        )
        if not started:
            single_flight_joins_total.labels(schema=schema_name).inc()
            logger.debug("Joined in-flight generation", key=key, waiters=flight.waiters)
        
        return await self._wait(flight.task, key, request, cached)
    
    async def refresh(self, key: str, request: GenerationRequest) -> Artifact:
        """
        Regenerate ``key`` even if its artifact is still servable.
        
        Non-destructive: the existing artifact stays in place until it is
        replaced, and is served as stale if generation fails.
        """
        self._check_input(key, request)
        cached = await self.store.find(key)
        flight, started = self._flights.join_or_start(
            key, lambda: self._generate(key, request, cached, force=True)
        )
        logger.info("Refresh requested", key=key, joined=not started)
        return await self._wait(flight.task, key, request, cached)
    
    async def invalidate(self, key: str) -> bool:
        """
        Delete the artifact for ``key``.
        
        An in-flight generation for ``key`` is not cancelled and will store
        its result when it completes.
        """
        self._check_key(key)
        deleted = await self.store.delete(key)
        flight = self._flights.get(key)
        logger.info(
            "Invalidated artifact",
            key=key,
            deleted=deleted,
            in_flight=flight is not None,
            waiters=flight.waiters if flight is not None else 0,
        )
        return deleted
    
    async def shutdown(self) -> None:
        """Wait for background generations to finish."""
        pending = len(self._flights)
        if pending:
            logger.info("Waiting for in-flight generations", count=pending)
        await self._flights.drain()
    
    @property
    def in_flight(self) -> int:
        return len(self._flights)
    
    # === Waiting ===
    
    async def _wait(
        self,
        task: asyncio.Task,
        key: str,
        request: GenerationRequest,
        cached: Optional[Artifact],
    ) -> Artifact:
        deadline = request.deadline_seconds or self.settings.REQUEST_DEADLINE_SECONDS
        try:
            # shield: a waiter timing out must not cancel the shared task
            return await asyncio.wait_for(asyncio.shield(task), timeout=deadline)
        except asyncio.TimeoutError:
            waiter_deadline_exceeded_total.labels(schema=request.schema_name).inc()
            logger.warning(
                "Caller deadline exceeded, generation continues in background",
                key=key,
                deadline_seconds=deadline,
                has_stale=cached is not None,
            )
            if cached is not None:
                return cached.as_observed(self._clock())
            return self.synthesizer.synthesize(
                key, request, failure_reason="deadline", now=self._clock()
            )
    
    # === Generation (runs as the single-flight task) ===
    
    async def _generate(
        self,
        key: str,
        request: GenerationRequest,
        known: Optional[Artifact],
        force: bool = False,
    ) -> Artifact:
        current = await self.store.find(key)
        if not force and current is not None and current.is_servable(self._clock()):
            logger.debug("Artifact stored by a concurrent generation", key=key)
            return current
        
        previous = current or known
        log = logger.bind(key=key, schema=request.schema_name)
        deadline = request.deadline_seconds or self.settings.REQUEST_DEADLINE_SECONDS
        retry_deadline = time.monotonic() + deadline
        hint = None if request.schema.is_text else request.schema.to_json_schema()
        
        attempts = 0
        failure_reason: Optional[str] = None
        rounds = max(1, self.settings.VALIDATION_ATTEMPTS)
        
        for round_number in range(1, rounds + 1):
            try:
                text, metadata = await self.retry_policy.with_retry(
                    self.provider.generate,
                    request.prompt,
                    deadline=retry_deadline,
                    response_schema=hint,
                )
            except RetryExhausted as e:
                attempts += e.retry_metadata.total_attempts
                failure_reason = e.kind.value
                log.warning(
                    "Provider retries exhausted",
                    attempts=e.retry_metadata.total_attempts,
                    error_kinds=e.retry_metadata.error_kinds,
                    deadline_hit=e.retry_metadata.deadline_hit,
                )
                break
            except ProviderError as e:
                attempts += 1
                failure_reason = e.kind.value
                log.warning("Provider call failed", kind=e.kind.value, error=e.message)
                break
            except Exception as e:
                attempts += 1
                failure_reason = ProviderErrorKind.UNKNOWN.value
                log.error(
                    "Unexpected provider failure",
                    error_type=type(e).__name__,
                    error=str(e),
                    exc_info=True,
                )
                break
            
            attempts += metadata.total_attempts
            try:
                payload = self.validator.validate(text, request.schema)
            except ValidationError as e:
                failure_reason = e.error_type
                log.warning(
                    "Provider output rejected",
                    round=round_number,
                    rounds=rounds,
                    error_type=e.error_type,
                    error=e.message,
                )
                continue
            
            artifact = Artifact.build(
                key=key,
                schema_name=request.schema_name,
                payload=payload,
                status=ArtifactStatus.FRESH,
                ttl_seconds=request.fresh_ttl_seconds or self.settings.FRESH_TTL_SECONDS,
                context=dict(request.context),
                attempts=attempts,
                now=self._clock(),
            )
            await self.store.upsert(artifact)
            artifacts_produced_total.labels(
                schema=request.schema_name, status=ArtifactStatus.FRESH.value
            ).inc()
            log.info("Generated artifact", attempts=attempts)
            return artifact
        
        return await self._degrade(key, request, previous, failure_reason, attempts)
    
    async def _degrade(
        self,
        key: str,
        request: GenerationRequest,
        previous: Optional[Artifact],
        failure_reason: Optional[str],
        attempts: int,
    ) -> Artifact:
        # Only real generated content outranks a new fallback
        if (
            self.settings.SERVE_STALE_ON_FAILURE
            and previous is not None
            and previous.status == ArtifactStatus.FRESH
        ):
            artifacts_produced_total.labels(
                schema=request.schema_name, status=ArtifactStatus.STALE.value
            ).inc()
            logger.warning(
                "Generation unusable, serving previous artifact",
                key=key,
                failure_reason=failure_reason,
                generated_at=previous.created_at.isoformat(),
            )
            return previous.as_observed(self._clock())
        
        fallback = self.synthesizer.synthesize(
            key, request, failure_reason=failure_reason, attempts=attempts, now=self._clock()
        )
        await self.store.upsert(fallback)
        artifacts_produced_total.labels(
            schema=request.schema_name, status=ArtifactStatus.FALLBACK.value
        ).inc()
        return fallback
    
    # === Input checks ===
    
    def _within_revalidate_window(self, cached: Artifact, now: datetime) -> bool:
        window = self.settings.STALE_WHILE_REVALIDATE_SECONDS
        if window <= 0 or cached.status != ArtifactStatus.FRESH:
            return False
        return (now - cached.next_refresh_at).total_seconds() < window
    
    @staticmethod
    def _check_key(key: str) -> None:
        if not isinstance(key, str) or not key.strip():
            raise InvalidKeyError("Generation key must be a non-empty string", {"key": repr(key)})
        if len(key) > MAX_KEY_LENGTH:
            raise InvalidKeyError(
                f"Generation key exceeds {MAX_KEY_LENGTH} characters",
                {"length": len(key)},
            )
    
    def _check_input(self, key: str, request: GenerationRequest) -> None:
        self._check_key(key)
        if not isinstance(request, GenerationRequest):
            raise InvalidRequestError(
                "Expected a GenerationRequest", {"type": type(request).__name__}
            )
        if not request.prompt or not request.prompt.strip():
            raise InvalidRequestError("Generation request has an empty prompt", {"key": key})
        if not callable(request.fallback):
            raise InvalidRequestError("Generation request has no fallback policy", {"key": key})
