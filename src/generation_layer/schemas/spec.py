"""
Declarative response schemas.

A ResponseSchema describes what a usable provider response looks like:
required fields, their types, closed enum sets, array-length rules and
defaults. It is a tagged variant:

- STRUCTURED: a JSON object described by a tuple of FieldSpec
- TEXT: free-form markdown described by a TextSpec

The validation layer coerces provider output against these declarations,
and every schema renders itself as a draft-7 JSON Schema which is used
both as a structured-output hint for the provider and as the final
conformance check before an artifact is persisted.
"""

from dataclasses import dataclass
from typing import Any, Optional

from generation_layer.models.enums import FieldType, SchemaKind


class _Missing:
    """Sentinel for "no default declared"."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class ArrayRule:
    """
    Length constraint for list fields.

    Lists longer than ``exact``/``max_length`` are truncated. Lists shorter
    than ``exact``/``min_length`` are padded with ``filler`` when one is
    declared and rejected otherwise.
    """

    exact: Optional[int] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    filler: Any = MISSING

    def __post_init__(self) -> None:
        if self.exact is not None and (self.min_length is not None or self.max_length is not None):
            raise ValueError("exact cannot be combined with min_length/max_length")
        if (
            self.min_length is not None
            and self.max_length is not None
            and self.min_length > self.max_length
        ):
            raise ValueError("min_length must be <= max_length")

    @property
    def lower_bound(self) -> int:
        if self.exact is not None:
            return self.exact
        return self.min_length or 0

    @property
    def upper_bound(self) -> Optional[int]:
        if self.exact is not None:
            return self.exact
        return self.max_length

    @property
    def has_filler(self) -> bool:
        return self.filler is not MISSING


@dataclass(frozen=True)
class FieldSpec:
    """
    One field of a structured schema.

    A field without a default is required and non-defaultable: its absence
    is a hard validation error. A field with a default falls back to it
    when absent (and, for numbers and enums, when unusable).

    Attributes:
        name: Key in the payload
        type: Declared value type
        default: Value used when absent/unusable (MISSING = required)
        enum_values: Closed set for ENUM fields (matched case-insensitively)
        aliases: Alternate keys the provider may use for this field
        array: Length rule for list fields
        item_fields: Nested fields for OBJECT_LIST items
        must_match: Sibling list field that must contain this value
    """

    name: str
    type: FieldType
    default: Any = MISSING
    enum_values: tuple[str, ...] = ()
    aliases: tuple[str, ...] = ()
    array: Optional[ArrayRule] = None
    item_fields: tuple["FieldSpec", ...] = ()
    must_match: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if self.type == FieldType.ENUM and not self.enum_values:
            raise ValueError(f"enum field '{self.name}' declares no values")
        if self.type == FieldType.ENUM and self.has_default and self.default not in self.enum_values:
            raise ValueError(f"default of enum field '{self.name}' is not an allowed value")
        if self.type == FieldType.OBJECT_LIST and not self.item_fields:
            raise ValueError(f"object list '{self.name}' declares no item fields")

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def required(self) -> bool:
        return not self.has_default

    @property
    def keys(self) -> tuple[str, ...]:
        """Payload keys to look up, canonical name first."""
        return (self.name, *self.aliases)

    def to_json_schema(self) -> dict[str, Any]:
        """Render this field as a JSON Schema fragment."""
        schema: dict[str, Any]
        if self.type == FieldType.STRING:
            schema = {"type": "string"}
        elif self.type == FieldType.NUMBER:
            schema = {"type": "number"}
        elif self.type == FieldType.ENUM:
            schema = {"type": "string", "enum": list(self.enum_values)}
        elif self.type == FieldType.STRING_LIST:
            schema = {"type": "array", "items": {"type": "string"}}
        else:
            schema = {"type": "array", "items": object_json_schema(self.item_fields)}

        if self.array is not None:
            if self.array.lower_bound:
                schema["minItems"] = self.array.lower_bound
            if self.array.upper_bound is not None:
                schema["maxItems"] = self.array.upper_bound
        if self.description:
            schema["description"] = self.description
        return schema


def object_json_schema(fields: tuple[FieldSpec, ...]) -> dict[str, Any]:
    """JSON Schema of an object whose properties are ``fields``."""
    return {
        "type": "object",
        "properties": {spec.name: spec.to_json_schema() for spec in fields},
        # Coercion fills every defaultable field, so all are present after stage 2
        "required": [spec.name for spec in fields],
    }


@dataclass(frozen=True)
class TextSpec:
    """Constraints for free-text payloads."""

    min_chars: int = 1
    soft_max_words: Optional[int] = None


@dataclass(frozen=True)
class ResponseSchema:
    """
    Tagged-variant description of an acceptable response.

    Build instances with ``ResponseSchema.structured`` or
    ``ResponseSchema.free_text`` rather than the constructor.
    """

    name: str
    kind: SchemaKind
    fields: tuple[FieldSpec, ...] = ()
    text: Optional[TextSpec] = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("schema name must not be empty")
        if self.kind == SchemaKind.STRUCTURED:
            if not self.fields:
                raise ValueError(f"structured schema '{self.name}' declares no fields")
            names = [spec.name for spec in self.fields]
            if len(names) != len(set(names)):
                raise ValueError(f"structured schema '{self.name}' has duplicate fields")
        elif self.text is None:
            raise ValueError(f"text schema '{self.name}' needs a TextSpec")

    @classmethod
    def structured(cls, name: str, *fields: FieldSpec) -> "ResponseSchema":
        return cls(name=name, kind=SchemaKind.STRUCTURED, fields=tuple(fields))

    @classmethod
    def free_text(
        cls, name: str, min_chars: int = 1, soft_max_words: Optional[int] = None
    ) -> "ResponseSchema":
        return cls(
            name=name,
            kind=SchemaKind.TEXT,
            text=TextSpec(min_chars=min_chars, soft_max_words=soft_max_words),
        )

    @property
    def is_text(self) -> bool:
        return self.kind == SchemaKind.TEXT

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def to_json_schema(self) -> dict[str, Any]:
        """Draft-7 JSON Schema for payloads of this schema."""
        if self.is_text:
            return {
                "$schema": "http://json-schema.org/draft-07/schema#",
                "title": self.name,
                "type": "string",
                "minLength": self.text.min_chars,
            }
        schema = object_json_schema(self.fields)
        schema["$schema"] = "http://json-schema.org/draft-07/schema#"
        schema["title"] = self.name
        return schema
