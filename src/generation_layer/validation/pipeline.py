"""
Response validator: multi-stage validation orchestrator.

Structured schemas:
- Stage 1: Extract a JSON object (fence strip, then brace extraction)
- Stage 2: Coerce to the declared shape (defaults, enums, arrays)
- Stage 3: JSON Schema conformance

Text schemas: fences stripped, whitespace trimmed, minimum length
enforced; the soft word target only produces a warning.

Every stage raises a ValidationError subclass on hard failure.
"""

from typing import Any

import structlog

from generation_layer.models.artifact import Payload
from generation_layer.monitoring.metrics import validation_failures_total
from generation_layer.schemas.spec import ResponseSchema
from .exceptions import SchemaMismatch, ValidationError
from .stage1_extract import Stage1Extract, strip_fences
from .stage2_coerce import Stage2Coerce
from .stage3_conformance import Stage3Conformance

logger = structlog.get_logger(__name__)


class ResponseValidator:
    """
    Validates raw provider output against a ResponseSchema.
    
    Stateless apart from the compiled JSON Schema cache, so one instance
    can be shared by all concurrent generations.
    """
    
    def __init__(self):
        self.stage1 = Stage1Extract()
        self.stage2 = Stage2Coerce()
        self.stage3 = Stage3Conformance()
    
    def validate(self, raw_text: str, schema: ResponseSchema) -> Payload:
        """
        Turn raw provider text into a schema-valid payload.
        
        Args:
            raw_text: Text as returned by the provider
            schema: Expected response shape
        
        Returns:
            A dict for structured schemas, a string for text schemas
        
        Raises:
            ValidationError: If no strategy yields a conforming payload
        """
        if schema.is_text:
            return self._validate_text(raw_text, schema)
        
        try:
            parsed = self.stage1.extract(raw_text)
            payload = self.stage2.coerce(parsed, schema)
            self.stage3.validate(payload, schema)
        except ValidationError as e:
            logger.warning(
                "Response validation failed",
                schema=schema.name,
                error_type=e.error_type,
                error=e.message,
                details=e.details,
            )
            raise
        
        logger.debug("Response validated", schema=schema.name, fields=len(payload))
        return payload
    
    def conform(self, payload: Any, schema: ResponseSchema) -> Payload:
        """
        Validate an already-parsed payload (e.g. a fallback record).
        
        Structured payloads go through coercion and conformance; text
        payloads through the text rules.
        """
        if schema.is_text:
            if not isinstance(payload, str):
                raise SchemaMismatch(
                    f"Schema '{schema.name}' expects text, got {type(payload).__name__}"
                )
            return self._validate_text(payload, schema)
        
        if not isinstance(payload, dict):
            raise SchemaMismatch(
                f"Schema '{schema.name}' expects an object, got {type(payload).__name__}"
            )
        coerced = self.stage2.coerce(payload, schema)
        self.stage3.validate(coerced, schema)
        return coerced
    
    def _validate_text(self, raw_text: str, schema: ResponseSchema) -> str:
        text = strip_fences(raw_text or "")
        spec = schema.text
        
        if len(text) < spec.min_chars:
            validation_failures_total.labels(
                stage="text", error_type="schema_mismatch"
            ).inc()
            raise SchemaMismatch(
                f"Text response for '{schema.name}' is empty or too short "
                f"({len(text)} < {spec.min_chars} chars)"
            )
        
        if spec.soft_max_words:
            word_count = len(text.split())
            if word_count > spec.soft_max_words:
                logger.warning(
                    "Text response exceeds soft word target",
                    schema=schema.name,
                    word_count=word_count,
                    soft_max_words=spec.soft_max_words,
                )
        
        self.stage3.validate(text, schema)
        return text
