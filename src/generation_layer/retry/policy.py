"""
Retry policy for provider calls.

Decides retry vs. abort from the ProviderErrorKind alone and computes
exponential backoff delays:

    delay(n) = base_delay * multiplier ** (n - 1) + uniform(0, jitter)

where n is the number of the attempt that just failed. With the defaults
(3 attempts, 0.5s base, x2) a call that keeps failing transiently sleeps
~0.5s and ~1.0s before giving up.

Usage:
    policy = RetryPolicy.from_settings(settings)
    text, metadata = await policy.with_retry(client.generate, prompt)
"""

import asyncio
import random
import time
from typing import Any, Awaitable, Callable, Optional

import structlog

from generation_layer.models.enums import RetryDecision
from generation_layer.monitoring.metrics import retries_total
from generation_layer.provider.exceptions import ProviderError
from generation_layer.retry.exceptions import RetryExhausted
from generation_layer.retry.metadata import RetryMetadata

logger = structlog.get_logger(__name__)

GenerateFn = Callable[..., Awaitable[str]]


class RetryPolicy:
    """
    Exponential-backoff retry policy around ``generate(prompt)``.
    
    Transient kinds (rate_limited, unavailable, timeout) are retried up to
    the attempt cap; every other kind aborts after the first attempt.
    
    Attributes:
        max_attempts: Default attempt cap (first call included)
        base_delay: Delay after the first failed attempt, in seconds
        multiplier: Growth factor per attempt
        jitter: Upper bound of the uniform random delay added to each sleep
    """
    
    def __init__(
        self,
        max_attempts: int = 3,
        base_delay: float = 0.5,
        multiplier: float = 2.0,
        jitter: float = 0.1,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        rng: Optional[random.Random] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if base_delay < 0 or jitter < 0:
            raise ValueError("delays must be >= 0")
        if multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.multiplier = multiplier
        self.jitter = jitter
        self._sleep = sleep or asyncio.sleep
        self._rng = rng or random.Random()
    
    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        return cls(
            max_attempts=settings.MAX_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY,
            multiplier=settings.RETRY_MULTIPLIER,
            jitter=settings.RETRY_JITTER,
        )
    
    def decide(
        self, error: ProviderError, attempt: int, max_attempts: Optional[int] = None
    ) -> RetryDecision:
        """
        Decide what to do after ``attempt`` failed with ``error``.
        
        Args:
            error: Failure of the attempt
            attempt: 1-based number of the attempt that failed
            max_attempts: Cap override (defaults to the policy's cap)
        """
        cap = max_attempts or self.max_attempts
        if not error.is_transient:
            return RetryDecision.ABORT
        if attempt >= cap:
            return RetryDecision.ABORT
        return RetryDecision.RETRY
    
    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        delay = self.base_delay * (self.multiplier ** (attempt - 1))
        if self.jitter:
            delay += self._rng.uniform(0, self.jitter)
        return delay
    
    async def with_retry(
        self,
        generate: GenerateFn,
        prompt: str,
        max_attempts: Optional[int] = None,
        deadline: Optional[float] = None,
        **generate_kwargs: Any,
    ) -> tuple[str, RetryMetadata]:
        """
        Call ``generate(prompt)`` until it succeeds or the policy aborts.
        
        Args:
            generate: Async provider call, one attempt per invocation
            prompt: Prompt text
            max_attempts: Attempt cap override
            deadline: Absolute ``time.monotonic()`` value after which no
                further attempt is started
            **generate_kwargs: Forwarded to ``generate``
        
        Returns:
            Tuple of (generated text, retry metadata)
        
        Raises:
            ProviderError: A non-transient failure (raised as-is, one attempt)
            RetryExhausted: A transient failure outlasted the cap or deadline
        """
        cap = max_attempts or self.max_attempts
        started = time.monotonic()
        error_kinds: list[str] = []
        total_delay = 0.0
        attempt = 0
        
        while True:
            attempt += 1
            try:
                text = await generate(prompt, **generate_kwargs)
            except ProviderError as e:
                error_kinds.append(e.kind.value)
                decision = self.decide(e, attempt, cap)
                
                if decision == RetryDecision.ABORT:
                    if not e.is_transient:
                        logger.warning(
                            "Provider error is not retryable",
                            attempt=attempt,
                            kind=e.kind.value,
                            error=e.message,
                        )
                        raise
                    raise RetryExhausted(
                        last_error=e,
                        retry_metadata=self._metadata(attempt, error_kinds, total_delay, started),
                    ) from e
                
                delay = self.backoff_delay(attempt)
                if deadline is not None and time.monotonic() + delay >= deadline:
                    logger.warning(
                        "Retry budget exhausted before next attempt",
                        attempt=attempt,
                        kind=e.kind.value,
                        delay=round(delay, 3),
                    )
                    raise RetryExhausted(
                        last_error=e,
                        retry_metadata=self._metadata(
                            attempt, error_kinds, total_delay, started, deadline_hit=True
                        ),
                    ) from e
                
                retries_total.labels(kind=e.kind.value).inc()
                logger.info(
                    "Retrying provider call",
                    attempt=attempt,
                    max_attempts=cap,
                    kind=e.kind.value,
                    delay=round(delay, 3),
                )
                await self._sleep(delay)
                total_delay += delay
                continue
            
            metadata = self._metadata(attempt, error_kinds, total_delay, started)
            if attempt > 1:
                logger.info(
                    "Provider call succeeded after retry",
                    total_attempts=attempt,
                    total_latency_ms=metadata.total_latency_ms,
                )
            return text, metadata
    
    @staticmethod
    def _metadata(
        attempts: int,
        error_kinds: list[str],
        total_delay: float,
        started: float,
        deadline_hit: bool = False,
    ) -> RetryMetadata:
        return RetryMetadata(
            total_attempts=attempts,
            error_kinds=list(error_kinds),
            total_delay_seconds=total_delay,
            total_latency_ms=int((time.monotonic() - started) * 1000),
            deadline_hit=deadline_hit,
        )


async def with_retry(
    generate: GenerateFn,
    prompt: str,
    max_attempts: int = 3,
    **kwargs: Any,
) -> tuple[str, RetryMetadata]:
    """Shorthand for ``RetryPolicy(max_attempts).with_retry(generate, prompt)``."""
    return await RetryPolicy(max_attempts=max_attempts).with_retry(generate, prompt, **kwargs)
