"""Unit tests for API request and response models."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from generation_layer.api.models import (
    ArtifactResponse,
    CoverLetterRequest,
    ImprovementTipRequest,
    InsightsRequest,
    RefreshAccepted,
)
from generation_layer.models.artifact import Artifact
from generation_layer.models.enums import ArtifactStatus


class TestRequestModels:
    
    def test_insights_requires_industry(self):
        with pytest.raises(ValidationError):
            InsightsRequest(industry="")
    
    def test_cover_letter_defaults(self):
        body = CoverLetterRequest(job_title="Nurse", company_name="City Hospital")
        
        assert body.key is None
        assert body.skills == []
        assert body.job_description == ""
    
    def test_improvement_tip_needs_wrong_answers(self):
        with pytest.raises(ValidationError):
            ImprovementTipRequest(industry="tech", wrong_answers=[])
    
    def test_wrong_answer_parsing(self):
        body = ImprovementTipRequest(
            industry="tech",
            wrong_answers=[{"question": "What is REST?", "answer": "An architectural style"}],
        )
        
        assert body.wrong_answers[0].user_answer == ""


class TestArtifactResponse:
    
    def test_due_fresh_artifact_reported_stale(self):
        created = datetime.now(timezone.utc) - timedelta(days=8)
        artifact = Artifact.build(
            key="insights:tech",
            schema_name="industry_insights",
            payload={"growthRate": 2},
            status=ArtifactStatus.FRESH,
            ttl_seconds=7 * 24 * 3600,
            now=created,
        )
        
        response = ArtifactResponse.from_artifact(artifact)
        
        assert response.status == ArtifactStatus.STALE
        assert response.payload == {"growthRate": 2}
        assert response.created_at == created
    
    def test_text_payload_serialized(self):
        artifact = Artifact.build(
            key="cover-letter:acme:dev",
            schema_name="cover_letter",
            payload="Dear Hiring Manager,",
            status=ArtifactStatus.FALLBACK,
            ttl_seconds=3600,
            failure_reason="unavailable",
        )
        
        data = ArtifactResponse.from_artifact(artifact).model_dump(mode="json")
        
        assert data["status"] == "fallback"
        assert data["payload"] == "Dear Hiring Manager,"
        assert data["failure_reason"] == "unavailable"
    
    def test_refresh_accepted_timestamp(self):
        accepted = RefreshAccepted(key="insights:tech", task_id="abc")
        
        assert accepted.submitted_at.tzinfo is not None
