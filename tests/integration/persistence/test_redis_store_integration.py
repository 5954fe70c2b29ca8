"""
Integration tests for RedisArtifactStore against a real Redis server.
"""

from datetime import timedelta

import pytest

from generation_layer.models.artifact import Artifact, utcnow
from generation_layer.models.enums import ArtifactStatus
from generation_layer.persistence.redis_store import RedisArtifactStore
from generation_layer.schemas.catalog import INSIGHTS_SCHEMA_NAME, QUIZ_SCHEMA_NAME

pytestmark = pytest.mark.integration


def make_artifact(key, schema_name=INSIGHTS_SCHEMA_NAME, ttl_seconds=3600, age=timedelta(0)):
    return Artifact.build(
        key=key,
        schema_name=schema_name,
        payload={"growthRate": 4.0} if schema_name == INSIGHTS_SCHEMA_NAME else "tip",
        status=ArtifactStatus.FRESH,
        ttl_seconds=ttl_seconds,
        context={"industry": key.split(":", 1)[1]},
        now=utcnow() - age,
    )


@pytest.fixture
def store(real_async_redis_client):
    return RedisArtifactStore(real_async_redis_client, retention_seconds=600)


@pytest.mark.asyncio
async def test_upsert_find_delete(store, real_async_redis_client):
    artifact = make_artifact("insights:healthcare")
    
    await store.upsert(artifact)
    
    assert await store.find("insights:healthcare") == artifact
    assert 0 < await real_async_redis_client.ttl("artifact:insights:healthcare") <= 600
    
    assert await store.delete("insights:healthcare") is True
    assert await store.find("insights:healthcare") is None
    assert await real_async_redis_client.zcard("artifact_index:due:industry_insights") == 0
    assert await store.delete("insights:healthcare") is False


@pytest.mark.asyncio
async def test_list_due_uses_refresh_index(store):
    await store.upsert(make_artifact("insights:a", age=timedelta(hours=2)))
    await store.upsert(make_artifact("insights:b", age=timedelta(hours=3)))
    await store.upsert(make_artifact("insights:c"))
    await store.upsert(make_artifact("tip:d", schema_name=QUIZ_SCHEMA_NAME, age=timedelta(hours=2)))
    
    insights_due = await store.list_due(utcnow(), limit=10, schema_name=INSIGHTS_SCHEMA_NAME)
    all_due = await store.list_due(utcnow(), limit=10)
    
    assert [artifact.key for artifact in insights_due] == ["insights:b", "insights:a"]
    assert {artifact.key for artifact in all_due} == {"insights:a", "insights:b", "tip:d"}


@pytest.mark.asyncio
async def test_upsert_moves_index_entry(store):
    await store.upsert(make_artifact("insights:a", age=timedelta(hours=2)))
    
    await store.upsert(make_artifact("insights:a"))
    
    assert await store.list_due(utcnow(), limit=10, schema_name=INSIGHTS_SCHEMA_NAME) == []


@pytest.mark.asyncio
async def test_schema_change_leaves_only_new_index(store, real_async_redis_client):
    await store.upsert(make_artifact("shared:key", age=timedelta(hours=2)))
    
    await store.upsert(make_artifact("shared:key", schema_name=QUIZ_SCHEMA_NAME, age=timedelta(hours=2)))
    
    assert await real_async_redis_client.zscore("artifact_index:due:industry_insights", "shared:key") is None
    assert await store.list_due(utcnow(), limit=10, schema_name=INSIGHTS_SCHEMA_NAME) == []
    quiz_due = await store.list_due(utcnow(), limit=10, schema_name=QUIZ_SCHEMA_NAME)
    assert [artifact.key for artifact in quiz_due] == ["shared:key"]


@pytest.mark.asyncio
async def test_expired_artifact_pruned_from_index(store, real_async_redis_client):
    await store.upsert(make_artifact("insights:gone", age=timedelta(hours=2)))
    await real_async_redis_client.delete("artifact:insights:gone")
    
    assert await store.list_due(utcnow(), limit=10, schema_name=INSIGHTS_SCHEMA_NAME) == []
    assert await real_async_redis_client.zcard("artifact_index:due:industry_insights") == 0


@pytest.mark.asyncio
async def test_health_check(store):
    assert await store.health_check() is True
