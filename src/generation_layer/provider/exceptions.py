"""
Exceptions for the provider client layer.

Every failed provider call surfaces as a ProviderError carrying a
ProviderErrorKind. The retry policy decides on the kind alone, so the
client never needs to know anything about retries or caching.
"""

from typing import Any, Optional

from generation_layer.models.enums import ProviderErrorKind


class ProviderError(Exception):
    """
    Base exception for all provider failures.
    
    Subclasses pin ``kind``; the base class can be raised with an explicit
    kind for signals that do not map onto a subclass.
    """
    
    kind: ProviderErrorKind = ProviderErrorKind.UNKNOWN
    
    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        kind: Optional[ProviderErrorKind] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if kind is not None:
            self.kind = kind
    
    @property
    def is_transient(self) -> bool:
        return self.kind.is_transient
    
    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class ProviderRateLimitError(ProviderError):
    """The provider rejected the call because of a rate limit or quota (retryable)."""
    
    kind = ProviderErrorKind.RATE_LIMITED


class ProviderUnavailableError(ProviderError):
    """The provider is overloaded, down, or unreachable (retryable)."""
    
    kind = ProviderErrorKind.UNAVAILABLE


class ProviderTimeoutError(ProviderError):
    """The call exceeded its timeout (retryable)."""
    
    kind = ProviderErrorKind.TIMEOUT


class ProviderMalformedResponseError(ProviderError):
    """
    The provider answered, but the envelope is unusable.
    
    Not retryable: the request itself is likely at fault (blocked prompt,
    empty candidates, undecodable body).
    """
    
    kind = ProviderErrorKind.MALFORMED


class ProviderNotConfiguredError(ProviderError):
    """No credentials are configured; no call was attempted."""
    
    kind = ProviderErrorKind.UNKNOWN


_ERRORS_BY_KIND: dict[ProviderErrorKind, type[ProviderError]] = {
    ProviderErrorKind.RATE_LIMITED: ProviderRateLimitError,
    ProviderErrorKind.UNAVAILABLE: ProviderUnavailableError,
    ProviderErrorKind.TIMEOUT: ProviderTimeoutError,
    ProviderErrorKind.MALFORMED: ProviderMalformedResponseError,
}


def error_for_kind(
    kind: ProviderErrorKind, message: str, details: Optional[dict[str, Any]] = None
) -> ProviderError:
    """Instantiate the most specific ProviderError subclass for ``kind``."""
    error_class = _ERRORS_BY_KIND.get(kind)
    if error_class is None:
        return ProviderError(message, details=details, kind=kind)
    return error_class(message, details=details)
