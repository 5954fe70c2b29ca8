"""
Fallback synthesizer.

Turns a request's FallbackPolicy into a Fallback artifact: the policy's
payload is checked against the request's ResponseSchema, tagged
``fallback`` and given a short refresh window so the provider is tried
again soon instead of the placeholder being cached for the full TTL.
"""

from datetime import datetime
from typing import Mapping, Optional

import structlog

from generation_layer.models.artifact import Artifact, Payload
from generation_layer.models.enums import ArtifactStatus
from generation_layer.models.request import FallbackPolicy, GenerationRequest
from generation_layer.orchestration.exceptions import InvalidRequestError
from generation_layer.provider.prompt_builder import PromptBuilder
from generation_layer.validation.exceptions import ValidationError
from generation_layer.validation.pipeline import ResponseValidator

logger = structlog.get_logger(__name__)

DEFAULT_FALLBACK_TTL_SECONDS = 3600


def template_policy(
    template_name: str, prompt_builder: Optional[PromptBuilder] = None
) -> FallbackPolicy:
    """
    FallbackPolicy that renders a Jinja2 template with the request context.
    
    Used for narrative payloads (e.g. a generic cover letter skeleton
    populated from caller-supplied fields).
    """
    builder = prompt_builder or PromptBuilder()
    
    def render(key: str, context: Mapping[str, str]) -> Payload:
        return builder.render(template_name, context)
    
    render.__name__ = f"template_policy[{template_name}]"
    return render


class FallbackSynthesizer:
    """
    Produces schema-valid placeholder artifacts without touching the network.
    
    Attributes:
        validator: Used to check policy output against the request schema
        fallback_ttl_seconds: Refresh window of fallback artifacts
    """
    
    def __init__(
        self,
        validator: Optional[ResponseValidator] = None,
        fallback_ttl_seconds: int = DEFAULT_FALLBACK_TTL_SECONDS,
    ):
        self.validator = validator or ResponseValidator()
        self.fallback_ttl_seconds = fallback_ttl_seconds
    
    def synthesize(
        self,
        key: str,
        request: GenerationRequest,
        failure_reason: Optional[str] = None,
        attempts: int = 0,
        now: Optional[datetime] = None,
    ) -> Artifact:
        """
        Build the fallback artifact for ``key``.
        
        Args:
            key: Generation key
            request: Request whose fallback policy and schema apply
            failure_reason: Error kind that made generation unusable
            attempts: Provider attempts spent before giving up
            now: Creation time (default: current UTC time)
        
        Raises:
            InvalidRequestError: The request's fallback policy is broken
                (raises, or returns content that violates its own schema)
        """
        try:
            payload = request.fallback(key, request.context)
            payload = self.validator.conform(payload, request.schema)
        except ValidationError as e:
            logger.error(
                "Fallback policy produced invalid content",
                key=key,
                schema=request.schema_name,
                error=e.message,
                details=e.details,
            )
            raise InvalidRequestError(
                f"Fallback for schema '{request.schema_name}' does not satisfy the schema",
                details={"key": key, "error": e.message},
            ) from e
        except Exception as e:
            logger.error(
                "Fallback policy failed",
                key=key,
                schema=request.schema_name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise InvalidRequestError(
                f"Fallback for schema '{request.schema_name}' failed: {e}",
                details={"key": key, "error_type": type(e).__name__},
            ) from e
        
        artifact = Artifact.build(
            key=key,
            schema_name=request.schema_name,
            payload=payload,
            status=ArtifactStatus.FALLBACK,
            ttl_seconds=self.fallback_ttl_seconds,
            context=dict(request.context),
            attempts=attempts,
            failure_reason=failure_reason,
            now=now,
        )
        logger.info(
            "Synthesized fallback artifact",
            key=key,
            schema=request.schema_name,
            failure_reason=failure_reason,
            next_refresh_at=artifact.next_refresh_at.isoformat(),
        )
        return artifact
