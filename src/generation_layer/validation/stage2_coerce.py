"""
Stage 2: Schema coercion.

Bend a parsed JSON object into the declared shape of a structured
ResponseSchema:

- required, non-defaultable fields must be present (MissingRequiredField)
- enum values are matched case-insensitively against the closed set and
  replaced by the declared default when unrecognized
- numbers accept numeric strings ("5.2", "12%", "$85,000") and fall back
  to the declared default when absent or non-numeric
- arrays longer than their bound are truncated; shorter ones are padded
  with the declared filler, or rejected when there is none
- ``must_match`` values must be members of their sibling list

Only declared fields survive; unknown keys are dropped.
"""

import copy
import math
import re
from typing import Any, Optional

import structlog

from generation_layer.models.enums import FieldType
from generation_layer.monitoring.metrics import validation_failures_total
from generation_layer.schemas.spec import FieldSpec, ResponseSchema
from .exceptions import MissingRequiredField, SchemaMismatch, ValidationError

logger = structlog.get_logger(__name__)

_NUMERIC_DECORATION = re.compile(r"[%,$\s]")

_ABSENT = object()


class Stage2Coerce:
    """Stage 2 validator: parsed object -> payload with declared shape."""
    
    def coerce(self, data: dict[str, Any], schema: ResponseSchema) -> dict[str, Any]:
        """
        Coerce ``data`` against a structured schema.
        
        Raises:
            MissingRequiredField: A required, non-defaultable field is absent
            SchemaMismatch: A value cannot be made to fit its declaration
        """
        try:
            return self._coerce_object(data, schema.fields, path="")
        except ValidationError as e:
            validation_failures_total.labels(
                stage="coerce", error_type=e.error_type
            ).inc()
            raise
    
    def _coerce_object(
        self, data: dict[str, Any], fields: tuple[FieldSpec, ...], path: str
    ) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for spec in fields:
            field_path = f"{path}.{spec.name}" if path else spec.name
            result[spec.name] = self._coerce_field(spec, _lookup(data, spec), field_path)
        
        for spec in fields:
            if spec.must_match:
                field_path = f"{path}.{spec.name}" if path else spec.name
                result[spec.name] = _match_member(
                    result[spec.name], result.get(spec.must_match) or [], field_path
                )
        return result
    
    def _coerce_field(self, spec: FieldSpec, value: Any, path: str) -> Any:
        if value is _ABSENT:
            return _default_or_missing(spec, path)
        
        if spec.type == FieldType.STRING:
            return self._coerce_string(spec, value, path)
        if spec.type == FieldType.NUMBER:
            return self._coerce_number(spec, value, path)
        if spec.type == FieldType.ENUM:
            return self._coerce_enum(spec, value, path)
        if spec.type == FieldType.STRING_LIST:
            return self._coerce_string_list(spec, value, path)
        return self._coerce_object_list(spec, value, path)
    
    def _coerce_string(self, spec: FieldSpec, value: Any, path: str) -> str:
        text = _as_text(value)
        if text is None:
            raise SchemaMismatch(
                f"Field '{path}' must be a string, got {type(value).__name__}",
                field_path=path,
                invalid_value=value,
            )
        if not text and spec.required:
            raise MissingRequiredField(path, f"Required field '{path}' is empty")
        return text
    
    def _coerce_number(self, spec: FieldSpec, value: Any, path: str) -> Any:
        number = _as_number(value)
        if number is not None:
            return number
        if spec.has_default:
            logger.debug("Non-numeric value replaced by default", field=path, value=str(value)[:50])
            return copy.deepcopy(spec.default)
        raise SchemaMismatch(
            f"Field '{path}' is not numeric", field_path=path, invalid_value=value
        )
    
    def _coerce_enum(self, spec: FieldSpec, value: Any, path: str) -> str:
        text = _as_text(value)
        if text:
            folded = text.casefold()
            for allowed in spec.enum_values:
                if allowed.casefold() == folded:
                    return allowed
        if spec.has_default:
            logger.debug(
                "Unrecognized enum value replaced by default",
                field=path,
                value=str(value)[:50],
                default=spec.default,
            )
            return spec.default
        raise SchemaMismatch(
            f"Field '{path}' must be one of {list(spec.enum_values)}",
            field_path=path,
            invalid_value=value,
        )
    
    def _coerce_string_list(self, spec: FieldSpec, value: Any, path: str) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return self._unusable_list(spec, value, path)
        
        items = []
        for item in value:
            text = _as_text(item)
            if text:
                items.append(text)
        return _apply_array_rule(spec, items, path)
    
    def _coerce_object_list(self, spec: FieldSpec, value: Any, path: str) -> list[dict[str, Any]]:
        if not isinstance(value, list):
            return self._unusable_list(spec, value, path)
        
        objects = [item for item in value if isinstance(item, dict)]
        upper = spec.array.upper_bound if spec.array else None
        if upper is not None:
            # Extras are discarded anyway; do not fail on them
            objects = objects[:upper]
        
        items = [
            self._coerce_object(item, spec.item_fields, f"{path}[{index}]")
            for index, item in enumerate(objects)
        ]
        return _apply_array_rule(spec, items, path)
    
    def _unusable_list(self, spec: FieldSpec, value: Any, path: str) -> Any:
        if spec.has_default:
            return copy.deepcopy(spec.default)
        raise SchemaMismatch(
            f"Field '{path}' must be a list, got {type(value).__name__}",
            field_path=path,
            invalid_value=value,
        )


def _lookup(data: dict[str, Any], spec: FieldSpec) -> Any:
    """Value of the first of the field's keys present and non-null."""
    for key in spec.keys:
        if key in data and data[key] is not None:
            return data[key]
    return _ABSENT


def _default_or_missing(spec: FieldSpec, path: str) -> Any:
    if spec.required:
        raise MissingRequiredField(path)
    return copy.deepcopy(spec.default)


def _as_text(value: Any) -> Optional[str]:
    """Trimmed string form of a scalar, None for containers."""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        cleaned = _NUMERIC_DECORATION.sub("", value)
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _apply_array_rule(spec: FieldSpec, items: list[Any], path: str) -> list[Any]:
    rule = spec.array
    if rule is None:
        return items
    
    upper = rule.upper_bound
    if upper is not None and len(items) > upper:
        logger.debug("Truncating list", field=path, length=len(items), limit=upper)
        items = items[:upper]
    
    lower = rule.lower_bound
    if len(items) < lower:
        if not rule.has_filler:
            raise SchemaMismatch(
                f"Field '{path}' has {len(items)} item(s), expected at least {lower}",
                field_path=path,
            )
        items = items + [copy.deepcopy(rule.filler) for _ in range(lower - len(items))]
    return items


def _match_member(value: Any, members: list[Any], path: str) -> Any:
    """Return the member equal to ``value`` (case-insensitively), else fail."""
    if value in members:
        return value
    if isinstance(value, str):
        folded = value.casefold()
        for member in members:
            if isinstance(member, str) and member.casefold() == folded:
                return member
    raise SchemaMismatch(
        f"Field '{path}' does not match any of its options",
        field_path=path,
        invalid_value=value,
    )
