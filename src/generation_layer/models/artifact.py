"""
Artifact model: the cached unit of generated (or fallback) content.

Artifacts are immutable values. Regeneration produces a new Artifact that
replaces the previous one in the store by key.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from generation_layer.models.enums import ArtifactStatus


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


Payload = Union[dict[str, Any], str]


class Artifact(BaseModel):
    """
    A cached, schema-valid unit of content.
    
    The payload always satisfies the ResponseSchema named by schema_name,
    including fallback payloads.
    """
    
    model_config = ConfigDict(frozen=True)
    
    key: str = Field(..., min_length=1, description="Caller-supplied generation key")
    schema_name: str = Field(..., description="Name of the ResponseSchema the payload satisfies")
    payload: Payload = Field(..., description="Validated structured data or free text")
    status: ArtifactStatus = Field(..., description="fresh, stale (derived) or fallback")
    created_at: datetime = Field(default_factory=utcnow)
    next_refresh_at: datetime = Field(..., description="Regenerate once this time has passed")
    context: dict[str, str] = Field(
        default_factory=dict,
        description="Template variables the request was built from (used by background refresh)",
    )
    attempts: int = Field(default=0, ge=0, description="Provider attempts spent producing this artifact")
    failure_reason: Optional[str] = Field(
        default=None,
        description="Error kind that caused a fallback artifact",
    )
    
    def is_due(self, now: Optional[datetime] = None) -> bool:
        """True once next_refresh_at has passed."""
        return (now or utcnow()) >= self.next_refresh_at
    
    def is_servable(self, now: Optional[datetime] = None) -> bool:
        """Whether the artifact can be returned without generating."""
        return not self.is_due(now)
    
    def effective_status(self, now: Optional[datetime] = None) -> ArtifactStatus:
        """Status as observed by callers at ``now``."""
        if self.status == ArtifactStatus.FRESH and self.is_due(now):
            return ArtifactStatus.STALE
        return self.status
    
    def as_observed(self, now: Optional[datetime] = None) -> "Artifact":
        """Copy with status replaced by the effective status."""
        status = self.effective_status(now)
        if status == self.status:
            return self
        return self.model_copy(update={"status": status})
    
    @classmethod
    def build(
        cls,
        key: str,
        schema_name: str,
        payload: Payload,
        status: ArtifactStatus,
        ttl_seconds: int,
        context: Optional[dict[str, str]] = None,
        attempts: int = 0,
        failure_reason: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Artifact":
        """Create an artifact that becomes due ``ttl_seconds`` from now."""
        created_at = now or utcnow()
        return cls(
            key=key,
            schema_name=schema_name,
            payload=payload,
            status=status,
            created_at=created_at,
            next_refresh_at=created_at + timedelta(seconds=ttl_seconds),
            context=dict(context or {}),
            attempts=attempts,
            failure_reason=failure_reason,
        )
