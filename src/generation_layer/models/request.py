"""
GenerationRequest: what to generate, what a usable result looks like, and
what to serve when generation is unusable.
"""

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from generation_layer.models.artifact import Payload
from generation_layer.schemas.spec import ResponseSchema

# Pure, network-free producer of schema-valid default content
FallbackPolicy = Callable[[str, Mapping[str, str]], Payload]


@dataclass(frozen=True)
class GenerationRequest:
    """
    A rendered prompt plus its target schema and fallback policy.
    
    Attributes:
        prompt: Fully rendered prompt text sent to the provider
        schema: ResponseSchema the provider output must satisfy
        fallback: Pure function (key, context) -> schema-valid payload
        context: Template variables the prompt was rendered from
        template_name: Prompt template used (for logs and refresh)
        fresh_ttl_seconds: Override of the configured freshness window
        deadline_seconds: Override of the configured per-caller deadline
    """
    
    prompt: str
    schema: ResponseSchema
    fallback: FallbackPolicy
    context: Mapping[str, str] = field(default_factory=dict)
    template_name: Optional[str] = None
    fresh_ttl_seconds: Optional[int] = None
    deadline_seconds: Optional[float] = None
    
    @property
    def schema_name(self) -> str:
        return self.schema.name
