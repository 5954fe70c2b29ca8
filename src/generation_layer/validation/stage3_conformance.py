"""
Stage 3: JSON Schema conformance.

Validate a coerced payload against the draft-7 JSON Schema rendered by
its ResponseSchema. This is the invariant check for everything that gets
persisted: generated and fallback payloads alike must pass it.
"""

from typing import Any

import structlog
from jsonschema import Draft7Validator

from generation_layer.monitoring.metrics import validation_failures_total
from generation_layer.schemas.spec import ResponseSchema
from .exceptions import SchemaMismatch

logger = structlog.get_logger(__name__)


class Stage3Conformance:
    """Stage 3 validator: payload -> JSON Schema check."""
    
    def __init__(self):
        # schema name -> (schema, compiled validator)
        self._validators: dict[str, tuple[ResponseSchema, Draft7Validator]] = {}
    
    def _get_validator(self, schema: ResponseSchema) -> Draft7Validator:
        cached = self._validators.get(schema.name)
        if cached is not None and cached[0] == schema:
            return cached[1]
        
        json_schema = schema.to_json_schema()
        Draft7Validator.check_schema(json_schema)
        validator = Draft7Validator(json_schema)
        self._validators[schema.name] = (schema, validator)
        logger.debug("Compiled JSON Schema validator", schema=schema.name)
        return validator
    
    def validate(self, payload: Any, schema: ResponseSchema) -> None:
        """
        Check ``payload`` against ``schema``.
        
        Raises:
            SchemaMismatch: If the payload violates the JSON Schema
        """
        validator = self._get_validator(schema)
        errors = list(validator.iter_errors(payload))
        
        if errors:
            error_messages = []
            for error in errors[:10]:
                path = ".".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")
            
            validation_failures_total.labels(
                stage="conformance", error_type="schema_mismatch"
            ).inc()
            raise SchemaMismatch(
                f"JSON Schema validation failed with {len(errors)} error(s)",
                validation_errors=error_messages,
            )
