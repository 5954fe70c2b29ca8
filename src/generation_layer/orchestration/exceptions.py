"""
Caller-input exceptions of the orchestrator.

Together with StoreError these are the only failures callers of
``Orchestrator.obtain`` ever see; provider and validation failures are
absorbed into fallback content.
"""

from typing import Any, Optional


class OrchestrationError(Exception):
    """Base exception for invalid orchestrator input."""
    
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InvalidKeyError(OrchestrationError):
    """The generation key is empty, blank or too long."""


class InvalidRequestError(OrchestrationError):
    """The generation request is malformed or its fallback policy is broken."""
