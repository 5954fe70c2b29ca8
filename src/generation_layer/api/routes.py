"""
HTTP routes for obtaining, invalidating and refreshing generated content.

Every content endpoint answers 200 with an artifact as long as the
artifact store is reachable; degraded content is marked by its status
(stale or fallback).
"""

import structlog
from fastapi import APIRouter, Depends, Response, status

from generation_layer.api.dependencies import (
    get_orchestrator,
    get_request_builder,
    get_settings,
)
from generation_layer.api.models import (
    ArtifactResponse,
    CoverLetterRequest,
    HealthResponse,
    ImprovementTipRequest,
    InsightsRequest,
    QuizRequest,
    RefreshAccepted,
)
from generation_layer.config import Settings
from generation_layer.domains.requests import RequestBuilder
from generation_layer.orchestration.exceptions import InvalidKeyError
from generation_layer.orchestration.orchestrator import Orchestrator
from generation_layer.persistence.exceptions import StoreError
from generation_layer.tasks.refresh_tasks import refresh_industry_insights_task

logger = structlog.get_logger(__name__)

router = APIRouter()

INSIGHTS_KEY_PREFIX = "insights:"


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health(
    orchestrator: Orchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
) -> HealthResponse:
    """Liveness plus a store ping. Degraded when the store is unreachable."""
    store_ok = await orchestrator.store.health_check()
    return HealthResponse(
        status="healthy" if store_ok else "degraded",
        version=settings.APP_VERSION,
        store="ok" if store_ok else "unreachable",
        provider_configured=bool(settings.GEMINI_API_KEY),
        in_flight=orchestrator.in_flight,
    )


@router.post("/insights", response_model=ArtifactResponse, tags=["content"])
async def obtain_insights(
    body: InsightsRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    builder: RequestBuilder = Depends(get_request_builder),
) -> ArtifactResponse:
    """Market insights for an industry, cached for a week."""
    key, request = builder.insights(body.industry)
    artifact = await orchestrator.obtain(key, request)
    return ArtifactResponse.from_artifact(artifact)


@router.post("/quiz", response_model=ArtifactResponse, tags=["content"])
async def obtain_quiz(
    body: QuizRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    builder: RequestBuilder = Depends(get_request_builder),
) -> ArtifactResponse:
    """Ten multiple-choice interview questions for an industry and skill set."""
    key, request = builder.quiz(body.industry, body.skills)
    artifact = await orchestrator.obtain(key, request)
    return ArtifactResponse.from_artifact(artifact)


@router.post("/cover-letters", response_model=ArtifactResponse, tags=["content"])
async def obtain_cover_letter(
    body: CoverLetterRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    builder: RequestBuilder = Depends(get_request_builder),
) -> ArtifactResponse:
    """Markdown cover letter for a job application."""
    key, request = builder.cover_letter(
        job_title=body.job_title,
        company_name=body.company_name,
        job_description=body.job_description,
        industry=body.industry,
        experience=body.experience,
        skills=body.skills,
        bio=body.bio,
        key=body.key,
    )
    artifact = await orchestrator.obtain(key, request)
    return ArtifactResponse.from_artifact(artifact)


@router.post("/improvement-tips", response_model=ArtifactResponse, tags=["content"])
async def obtain_improvement_tip(
    body: ImprovementTipRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
    builder: RequestBuilder = Depends(get_request_builder),
) -> ArtifactResponse:
    """Short study tip derived from a quiz's wrong answers."""
    key, request = builder.improvement_tip(
        body.industry, [answer.model_dump() for answer in body.wrong_answers]
    )
    artifact = await orchestrator.obtain(key, request)
    return ArtifactResponse.from_artifact(artifact)


@router.delete(
    "/artifacts/{key:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["artifacts"],
)
async def invalidate_artifact(
    key: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Response:
    """Drop the cached artifact; the next request regenerates it."""
    await orchestrator.invalidate(key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/artifacts/{key:path}/refresh",
    response_model=RefreshAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    tags=["artifacts"],
)
async def refresh_artifact(
    key: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> RefreshAccepted:
    """
    Queue a background regeneration of an insights artifact.
    
    Non-destructive: the current artifact is served until the refresh
    replaces it.
    """
    if not key.startswith(INSIGHTS_KEY_PREFIX) or not key[len(INSIGHTS_KEY_PREFIX):].strip():
        raise InvalidKeyError(
            "Only insights artifacts can be refreshed on demand",
            {"key": key},
        )
    
    industry = key[len(INSIGHTS_KEY_PREFIX):]
    existing = await orchestrator.store.find(key)
    if existing is not None and existing.context.get("industry"):
        industry = existing.context["industry"]
    
    try:
        result = refresh_industry_insights_task.delay(industry)
    except Exception as e:
        logger.error("Failed to enqueue refresh", key=key, error=str(e))
        raise StoreError("Task queue unavailable", operation="enqueue_refresh") from e
    
    logger.info("Refresh queued", key=key, task_id=result.id)
    return RefreshAccepted(key=key, task_id=result.id)
