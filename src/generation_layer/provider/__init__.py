"""
Provider client abstraction and implementations.

Components:
- BaseProviderClient: single-attempt generate(prompt) -> text
- GeminiClient: Generative Language REST implementation (httpx)
- PromptBuilder: Jinja2 prompt rendering
- classification: status/message -> ProviderErrorKind
- exceptions: ProviderError hierarchy
"""

from generation_layer.provider.base_client import BaseProviderClient
from generation_layer.provider.classification import classify_failure
from generation_layer.provider.exceptions import (
    ProviderError,
    ProviderMalformedResponseError,
    ProviderNotConfiguredError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    error_for_kind,
)
from generation_layer.provider.gemini_client import GeminiClient
from generation_layer.provider.prompt_builder import PromptBuilder

__all__ = [
    "BaseProviderClient",
    "GeminiClient",
    "PromptBuilder",
    "classify_failure",
    "error_for_kind",
    "ProviderError",
    "ProviderMalformedResponseError",
    "ProviderNotConfiguredError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "ProviderUnavailableError",
]
