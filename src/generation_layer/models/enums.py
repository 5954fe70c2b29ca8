"""
Enumerations for the generation cache layer.

Closed sets only - values outside these sets are rejected or coerced
to a declared default by the validation layer.
"""

from enum import Enum


class ArtifactStatus(str, Enum):
    """
    Lifecycle status of a cached artifact.
    
    FRESH and FALLBACK are persisted. STALE is derived on read for a
    FRESH artifact whose refresh time has elapsed.
    """
    
    FRESH = "fresh"
    STALE = "stale"
    FALLBACK = "fallback"


class ProviderErrorKind(str, Enum):
    """Classification of a failed provider call."""
    
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"
    UNKNOWN = "unknown"
    
    @property
    def is_transient(self) -> bool:
        """Whether a fresh attempt can be expected to succeed."""
        return self in (
            ProviderErrorKind.RATE_LIMITED,
            ProviderErrorKind.UNAVAILABLE,
            ProviderErrorKind.TIMEOUT,
        )


class RetryDecision(str, Enum):
    """Outcome of consulting the retry policy after a failed attempt."""
    
    RETRY = "retry"
    ABORT = "abort"


class SchemaKind(str, Enum):
    """Tag of the ResponseSchema variant."""
    
    STRUCTURED = "structured"
    TEXT = "text"


class FieldType(str, Enum):
    """Value types a structured schema field can declare."""
    
    STRING = "string"
    NUMBER = "number"
    ENUM = "enum"
    STRING_LIST = "string_list"
    OBJECT_LIST = "object_list"


class DemandLevel(str, Enum):
    """Hiring demand for an industry."""
    
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class MarketOutlook(str, Enum):
    """Overall market outlook for an industry."""
    
    POSITIVE = "POSITIVE"
    NEUTRAL = "NEUTRAL"
    NEGATIVE = "NEGATIVE"
