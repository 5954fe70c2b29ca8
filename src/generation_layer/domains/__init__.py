"""Domain-specific generation requests."""

from generation_layer.domains.requests import (
    RequestBuilder,
    cover_letter_key,
    insights_key,
    normalize_industry,
    quiz_key,
)

__all__ = [
    "RequestBuilder",
    "cover_letter_key",
    "insights_key",
    "normalize_industry",
    "quiz_key",
]
