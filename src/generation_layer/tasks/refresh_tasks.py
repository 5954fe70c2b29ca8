"""
Celery tasks for refreshing cached artifacts in the background.

refresh_due_insights: regenerate industry insights whose refresh time has
passed, a bounded batch per run. Each artifact's request is rebuilt from
its stored schema name and context; regeneration goes through
Orchestrator.refresh so a failed run leaves the previous artifact in place.
"""

import asyncio
from datetime import datetime
from typing import Optional

import structlog
from celery import Task

from generation_layer.config import settings
from generation_layer.domains.requests import RequestBuilder
from generation_layer.models.artifact import utcnow
from generation_layer.orchestration.exceptions import OrchestrationError
from generation_layer.orchestration.factory import build_orchestrator, build_prompt_builder
from generation_layer.orchestration.orchestrator import Orchestrator
from generation_layer.persistence.exceptions import StoreError
from generation_layer.persistence.redis_client import RedisClient
from generation_layer.schemas.catalog import INSIGHTS_SCHEMA_NAME
from generation_layer.tasks.celery_app import celery_app

logger = structlog.get_logger(__name__)


async def refresh_due_artifacts(
    orchestrator: Orchestrator,
    request_builder: RequestBuilder,
    limit: int,
    schema_name: Optional[str] = INSIGHTS_SCHEMA_NAME,
    now: Optional[datetime] = None,
) -> dict:
    """
    Refresh up to ``limit`` artifacts due at ``now`` (default: current UTC time).
    
    Returns:
        Summary dict: due, refreshed (by resulting status), skipped keys
    """
    due = await orchestrator.store.list_due(now or utcnow(), limit, schema_name=schema_name)
    summary: dict = {"due": len(due), "refreshed": {}, "skipped": []}
    
    for artifact in due:
        try:
            request = request_builder.rebuild(artifact.schema_name, artifact.context)
            result = await orchestrator.refresh(artifact.key, request)
        except OrchestrationError as e:
            logger.warning("Skipping artifact refresh", key=artifact.key, error=e.message)
            summary["skipped"].append(artifact.key)
            continue
        
        status = result.status.value
        summary["refreshed"][status] = summary["refreshed"].get(status, 0) + 1
        logger.info(
            "Refreshed artifact",
            key=artifact.key,
            status=status,
            next_refresh_at=result.next_refresh_at.isoformat(),
        )
    
    await orchestrator.shutdown()
    return summary


class RefreshTask(Task):
    """
    Base task class with resource initialization.
    
    The prompt builder is reused across invocations. The orchestrator is
    built per run because each run owns its event loop (asyncio.run) and
    the Redis pool is bound to it.
    """
    
    _request_builder = None
    
    @property
    def request_builder(self) -> RequestBuilder:
        if self._request_builder is None:
            self._request_builder = RequestBuilder(build_prompt_builder(settings), settings)
        return self._request_builder


async def _run_refresh(request_builder: RequestBuilder, limit: int) -> dict:
    orchestrator = build_orchestrator(settings)
    try:
        return await refresh_due_artifacts(orchestrator, request_builder, limit)
    finally:
        await orchestrator.provider.close()
        await RedisClient.close_async_pool()


@celery_app.task(
    bind=True,
    base=RefreshTask,
    name="refresh_due_insights",
    autoretry_for=(StoreError,),
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=3,
)
def refresh_due_insights_task(self: RefreshTask, limit: Optional[int] = None) -> dict:
    """
    Weekly refresh of due industry insights.
    
    Args:
        limit: Batch size override (default: REFRESH_BATCH_LIMIT)
    """
    batch_limit = limit or settings.REFRESH_BATCH_LIMIT
    logger.info("Refresh task started", task_id=self.request.id, limit=batch_limit)
    
    summary = asyncio.run(_run_refresh(self.request_builder, batch_limit))
    
    logger.info("Refresh task finished", task_id=self.request.id, **summary)
    return summary


async def _run_single_refresh(request_builder: RequestBuilder, industry: str) -> dict:
    key, request = request_builder.insights(industry)
    orchestrator = build_orchestrator(settings)
    try:
        artifact = await orchestrator.refresh(key, request)
        await orchestrator.shutdown()
    finally:
        await orchestrator.provider.close()
        await RedisClient.close_async_pool()
    return {
        "key": artifact.key,
        "status": artifact.status.value,
        "next_refresh_at": artifact.next_refresh_at.isoformat(),
    }


@celery_app.task(
    bind=True,
    base=RefreshTask,
    name="refresh_industry_insights",
    autoretry_for=(StoreError,),
    retry_backoff=True,
    retry_backoff_max=600,
    max_retries=3,
)
def refresh_industry_insights_task(self: RefreshTask, industry: str) -> dict:
    """On-demand refresh of one industry's insights (POST /artifacts/{key}/refresh)."""
    logger.info("Single refresh started", task_id=self.request.id, industry=industry)
    result = asyncio.run(_run_single_refresh(self.request_builder, industry))
    logger.info("Single refresh finished", task_id=self.request.id, **result)
    return result
