"""
API request and response models for the FastAPI endpoints.

Request bodies are validated by pydantic; responses wrap the Artifact
domain model.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from generation_layer.models.artifact import Artifact, utcnow
from generation_layer.models.enums import ArtifactStatus


class InsightsRequest(BaseModel):
    """Body of POST /insights."""
    
    industry: str = Field(..., min_length=1, max_length=100, examples=["healthcare"])


class QuizRequest(BaseModel):
    """Body of POST /quiz."""
    
    industry: str = Field(..., min_length=1, max_length=100)
    skills: list[str] = Field(default_factory=list, max_length=30)


class CoverLetterRequest(BaseModel):
    """Body of POST /cover-letters."""
    
    key: Optional[str] = Field(
        default=None,
        max_length=256,
        description="Cache key (default: derived from company and job title)",
    )
    job_title: str = Field(..., min_length=1, max_length=200)
    company_name: str = Field(..., min_length=1, max_length=200)
    job_description: str = Field(default="", max_length=20000)
    industry: str = Field(default="", max_length=100)
    experience: str = Field(default="", max_length=50, description="Years of experience")
    skills: list[str] = Field(default_factory=list, max_length=30)
    bio: str = Field(default="", max_length=5000)


class WrongAnswer(BaseModel):
    """One incorrectly answered quiz question."""
    
    question: str = Field(..., min_length=1)
    answer: str = Field(..., description="Correct answer")
    user_answer: str = Field(default="", description="Answer the user gave")


class ImprovementTipRequest(BaseModel):
    """Body of POST /improvement-tips."""
    
    industry: str = Field(..., min_length=1, max_length=100)
    wrong_answers: list[WrongAnswer] = Field(..., min_length=1, max_length=50)


class ArtifactResponse(BaseModel):
    """An artifact as seen by API clients."""
    
    key: str
    schema_name: str
    status: ArtifactStatus = Field(description="fresh, stale or fallback")
    payload: Union[dict[str, Any], str]
    created_at: datetime
    next_refresh_at: datetime
    attempts: int = 0
    failure_reason: Optional[str] = None
    
    @classmethod
    def from_artifact(cls, artifact: Artifact) -> "ArtifactResponse":
        observed = artifact.as_observed()
        return cls(
            key=observed.key,
            schema_name=observed.schema_name,
            status=observed.status,
            payload=observed.payload,
            created_at=observed.created_at,
            next_refresh_at=observed.next_refresh_at,
            attempts=observed.attempts,
            failure_reason=observed.failure_reason,
        )


class RefreshAccepted(BaseModel):
    """Response of POST /artifacts/{key}/refresh."""
    
    key: str
    task_id: str = Field(description="Celery task ID")
    submitted_at: datetime = Field(default_factory=utcnow)


class HealthResponse(BaseModel):
    """Response of GET /health."""
    
    status: str = Field(examples=["healthy", "degraded"])
    version: str
    store: str = Field(description="ok or unreachable")
    provider_configured: bool
    in_flight: int = Field(ge=0, description="Generations currently running")
