"""Retry policy for transient provider failures."""

from generation_layer.retry.exceptions import RetryExhausted
from generation_layer.retry.metadata import RetryMetadata
from generation_layer.retry.policy import RetryPolicy, with_retry

__all__ = ["RetryExhausted", "RetryMetadata", "RetryPolicy", "with_retry"]
