"""
Declarative response schemas.

- spec.py: ResponseSchema / FieldSpec / ArrayRule / TextSpec
- catalog.py: schemas for insights, quizzes, cover letters and tips
"""

from generation_layer.schemas.catalog import (
    INSIGHTS_SCHEMA,
    QUIZ_SCHEMA,
    cover_letter_schema,
    improvement_tip_schema,
)
from generation_layer.schemas.spec import (
    MISSING,
    ArrayRule,
    FieldSpec,
    ResponseSchema,
    TextSpec,
)

__all__ = [
    "MISSING",
    "ArrayRule",
    "FieldSpec",
    "ResponseSchema",
    "TextSpec",
    "INSIGHTS_SCHEMA",
    "QUIZ_SCHEMA",
    "cover_letter_schema",
    "improvement_tip_schema",
]
