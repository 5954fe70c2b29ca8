"""
Classification of provider failure signals into ProviderErrorKind.

Two signals are available: an HTTP-like status code and a message. The
status code wins when it is conclusive; otherwise the message is scanned
for transient markers ("429", "quota", "overloaded", "503", ...), which is
how SDK-style errors that only carry text are classified.
"""

import re
from typing import Optional

from generation_layer.models.enums import ProviderErrorKind

_RATE_LIMIT_PATTERN = re.compile(
    r"\b429\b|quota|rate[\s_-]?limit|resource[\s_-]?exhausted|too many requests",
    re.IGNORECASE,
)
_UNAVAILABLE_PATTERN = re.compile(
    r"\b50[023]\b|overloaded|unavailable|temporarily|try again later|connection (?:reset|refused)",
    re.IGNORECASE,
)
_TIMEOUT_PATTERN = re.compile(
    r"\b504\b|time[\s_-]?out|timed out|deadline[\s_-]?exceeded",
    re.IGNORECASE,
)
_MALFORMED_PATTERN = re.compile(
    r"malformed|invalid json|unexpected token|blocked|safety|no candidates",
    re.IGNORECASE,
)


def classify_status(status_code: int) -> Optional[ProviderErrorKind]:
    """Kind implied by an HTTP status code, or None when inconclusive."""
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMITED
    if status_code in (408, 504):
        return ProviderErrorKind.TIMEOUT
    if status_code in (500, 502, 503):
        return ProviderErrorKind.UNAVAILABLE
    return None


def classify_message(message: str) -> ProviderErrorKind:
    """Kind implied by an error message (UNKNOWN when nothing matches)."""
    if not message:
        return ProviderErrorKind.UNKNOWN
    if _RATE_LIMIT_PATTERN.search(message):
        return ProviderErrorKind.RATE_LIMITED
    if _TIMEOUT_PATTERN.search(message):
        return ProviderErrorKind.TIMEOUT
    if _UNAVAILABLE_PATTERN.search(message):
        return ProviderErrorKind.UNAVAILABLE
    if _MALFORMED_PATTERN.search(message):
        return ProviderErrorKind.MALFORMED
    return ProviderErrorKind.UNKNOWN


def classify_failure(status_code: Optional[int] = None, message: str = "") -> ProviderErrorKind:
    """
    Classify a provider failure from its status code and/or message.
    
    Examples:
        >>> classify_failure(429)
        <ProviderErrorKind.RATE_LIMITED: 'rate_limited'>
        >>> classify_failure(400, "Quota exceeded for model")
        <ProviderErrorKind.RATE_LIMITED: 'rate_limited'>
        >>> classify_failure(None, "The model is overloaded")
        <ProviderErrorKind.UNAVAILABLE: 'unavailable'>
    """
    if status_code is not None:
        kind = classify_status(status_code)
        if kind is not None:
            return kind
    return classify_message(message)
