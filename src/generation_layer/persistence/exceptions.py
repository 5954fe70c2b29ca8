"""Persistence exceptions."""

from typing import Any, Optional


class StoreError(Exception):
    """
    The artifact store is unreachable or failed an operation.
    
    Always surfaced to callers: without the store no content, not even
    stale content, can be determined.
    """
    
    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message
