"""
Data models for the generation cache layer.

- enums.py: ArtifactStatus, ProviderErrorKind, RetryDecision, schema enums
- artifact.py: Artifact (cached unit, pydantic)
- request.py: GenerationRequest (prompt + schema + fallback policy)
"""

from generation_layer.models.artifact import Artifact, Payload, utcnow
from generation_layer.models.enums import (
    ArtifactStatus,
    DemandLevel,
    FieldType,
    MarketOutlook,
    ProviderErrorKind,
    RetryDecision,
    SchemaKind,
)
from generation_layer.models.request import FallbackPolicy, GenerationRequest

__all__ = [
    "Artifact",
    "Payload",
    "utcnow",
    "ArtifactStatus",
    "DemandLevel",
    "FieldType",
    "MarketOutlook",
    "ProviderErrorKind",
    "RetryDecision",
    "SchemaKind",
    "FallbackPolicy",
    "GenerationRequest",
]
