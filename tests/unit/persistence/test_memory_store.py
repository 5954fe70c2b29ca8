"""
Unit tests for InMemoryArtifactStore.
"""

from datetime import datetime, timedelta, timezone

import pytest

from generation_layer.models.artifact import Artifact
from generation_layer.models.enums import ArtifactStatus

NOW = datetime(2026, 2, 1, tzinfo=timezone.utc)


def make_artifact(key, ttl_seconds=3600, schema_name="industry_insights", status=ArtifactStatus.FRESH):
    return Artifact.build(
        key=key,
        schema_name=schema_name,
        payload={"growthRate": 1},
        status=status,
        ttl_seconds=ttl_seconds,
        now=NOW,
    )


class TestInMemoryArtifactStore:
    
    @pytest.mark.asyncio
    async def test_find_missing_returns_none(self, memory_store):
        assert await memory_store.find("insights:none") is None
    
    @pytest.mark.asyncio
    async def test_upsert_then_find(self, memory_store):
        artifact = make_artifact("insights:tech")
        
        await memory_store.upsert(artifact)
        
        assert await memory_store.find("insights:tech") == artifact
    
    @pytest.mark.asyncio
    async def test_upsert_replaces_by_key(self, memory_store):
        await memory_store.upsert(make_artifact("insights:tech", status=ArtifactStatus.FALLBACK))
        replacement = make_artifact("insights:tech")
        
        await memory_store.upsert(replacement)
        
        assert (await memory_store.find("insights:tech")).status == ArtifactStatus.FRESH
        assert len(memory_store) == 1
    
    @pytest.mark.asyncio
    async def test_delete(self, memory_store):
        await memory_store.upsert(make_artifact("insights:tech"))
        
        assert await memory_store.delete("insights:tech") is True
        assert await memory_store.delete("insights:tech") is False
        assert await memory_store.find("insights:tech") is None
    
    @pytest.mark.asyncio
    async def test_list_due_orders_by_refresh_time(self, memory_store):
        await memory_store.upsert(make_artifact("insights:a", ttl_seconds=600))
        await memory_store.upsert(make_artifact("insights:b", ttl_seconds=60))
        await memory_store.upsert(make_artifact("insights:c", ttl_seconds=86400))
        
        due = await memory_store.list_due(NOW + timedelta(hours=1), limit=10)
        
        assert [artifact.key for artifact in due] == ["insights:b", "insights:a"]
    
    @pytest.mark.asyncio
    async def test_list_due_filters_schema_and_limits(self, memory_store):
        await memory_store.upsert(make_artifact("insights:a", ttl_seconds=60))
        await memory_store.upsert(make_artifact("insights:b", ttl_seconds=120))
        await memory_store.upsert(make_artifact("quiz:a:", ttl_seconds=60, schema_name="interview_quiz"))
        later = NOW + timedelta(hours=1)
        
        insights_due = await memory_store.list_due(later, limit=1, schema_name="industry_insights")
        
        assert [artifact.key for artifact in insights_due] == ["insights:a"]
    
    @pytest.mark.asyncio
    async def test_health_check_and_close(self, memory_store):
        assert await memory_store.health_check() is True
        await memory_store.close()
