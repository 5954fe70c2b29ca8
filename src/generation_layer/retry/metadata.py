"""
Retry metadata tracking.

Captures the attempt history of one with_retry() call for logs and for
the artifact's ``attempts`` counter.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryMetadata:
    """
    Attempt history of one retried provider call.
    
    Attributes:
        total_attempts: Number of provider calls made
        error_kinds: Kind of every failed attempt, in order
        total_delay_seconds: Sum of backoff delays slept
        total_latency_ms: Wall time from first attempt to outcome (ms)
        deadline_hit: Whether the retry budget cut the loop short
    """
    
    total_attempts: int
    error_kinds: list[str] = field(default_factory=list)
    total_delay_seconds: float = 0.0
    total_latency_ms: int = 0
    deadline_hit: bool = False
    
    def __post_init__(self) -> None:
        """Validate metadata invariants."""
        if self.total_attempts < 1:
            raise ValueError("total_attempts must be >= 1")
        if len(self.error_kinds) > self.total_attempts:
            raise ValueError("more errors recorded than attempts made")
        if self.total_delay_seconds < 0:
            raise ValueError("total_delay_seconds must be >= 0")
        if self.total_latency_ms < 0:
            raise ValueError("total_latency_ms must be >= 0")
