"""Response validation: extraction, coercion and conformance stages."""

from .exceptions import (
    MissingRequiredField,
    SchemaMismatch,
    UnparseableResponse,
    ValidationError,
)
from .pipeline import ResponseValidator
from .stage1_extract import strip_fences

__all__ = [
    "MissingRequiredField",
    "ResponseValidator",
    "SchemaMismatch",
    "UnparseableResponse",
    "ValidationError",
    "strip_fences",
]
