"""
Validation exceptions for the response validator.

A ValidationError is never retried against the same raw text. The
orchestrator treats it as a reason to request a fresh response (or to
degrade once its generation rounds are used up).
"""

from typing import Any, Optional


class ValidationError(Exception):
    """
    Base exception for all validation errors.
    
    Attributes:
        message: Human-readable error description
        details: Structured error data for logging/metrics
    """
    
    error_type = "validation_error"
    
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class UnparseableResponse(ValidationError):
    """
    No JSON object could be recovered from the raw text.
    
    Raised when neither the fence-stripped text nor the first-brace to
    last-brace substring parses as a JSON object.
    """
    
    error_type = "unparseable_response"
    
    def __init__(
        self,
        message: str,
        raw_content: Optional[str] = None,
        parse_error: Optional[str] = None,
    ):
        details = {}
        if raw_content:
            details["content_snippet"] = raw_content[:500]
        if parse_error:
            details["parse_error"] = parse_error
        
        super().__init__(message, details)


class MissingRequiredField(ValidationError):
    """A required, non-defaultable field is absent or empty."""
    
    error_type = "missing_required_field"
    
    def __init__(self, field_path: str, message: Optional[str] = None):
        self.field_path = field_path
        super().__init__(
            message or f"Required field '{field_path}' is missing",
            {"field_path": field_path},
        )


class SchemaMismatch(ValidationError):
    """
    A value cannot be made to fit its declared shape.
    
    Examples: an array shorter than its exact length with no filler, a
    correct answer that is not one of the options, a JSON Schema violation
    after coercion.
    """
    
    error_type = "schema_mismatch"
    
    def __init__(
        self,
        message: str,
        field_path: Optional[str] = None,
        validation_errors: Optional[list[str]] = None,
        invalid_value: Optional[Any] = None,
    ):
        details: dict[str, Any] = {}
        if field_path:
            details["field_path"] = field_path
        if validation_errors:
            details["validation_errors"] = validation_errors
        if invalid_value is not None:
            details["invalid_value"] = str(invalid_value)[:200]
        
        super().__init__(message, details)
