"""
Redis-backed artifact store.

Storage layout:
- Artifact: string "<prefix><key>" holding the artifact JSON, expiring
  after ARTIFACT_RETENTION_SECONDS (long after it went stale)
- Due index: sorted set "artifact_index:due:<schema>" with member = key,
  score = next_refresh_at (epoch seconds)

Writes go through a MULTI/EXEC pipeline so the artifact and its index
entry change together.
"""

from datetime import datetime
from typing import Any, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError

from generation_layer.models.artifact import Artifact
from .base import ArtifactStore
from .exceptions import StoreError

logger = structlog.get_logger(__name__)


class RedisArtifactStore(ArtifactStore):
    """ArtifactStore on top of redis.asyncio."""
    
    INDEX_PREFIX = "artifact_index:due:"
    
    def __init__(
        self,
        redis_client: AsyncRedis,
        key_prefix: str = "artifact:",
        retention_seconds: int = 30 * 24 * 3600,
    ):
        """
        Initialize store.
        
        Args:
            redis_client: Async Redis client (decode_responses=True)
            key_prefix: Prefix of artifact keys
            retention_seconds: Expiry of stored artifacts
        """
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.retention_seconds = retention_seconds
    
    def _artifact_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"
    
    def _index_key(self, schema_name: str) -> str:
        return f"{self.INDEX_PREFIX}{schema_name}"
    
    def _parse(self, key: str, raw: Optional[str]) -> Optional[Artifact]:
        if raw is None:
            return None
        try:
            return Artifact.model_validate_json(raw)
        except PydanticValidationError as e:
            # Unreadable entries behave as misses and get overwritten
            logger.warning(
                "Discarding unreadable artifact",
                key=key,
                error_count=e.error_count(),
            )
            return None
    
    async def find(self, key: str) -> Optional[Artifact]:
        try:
            raw = await self.redis.get(self._artifact_key(key))
        except RedisError as e:
            raise self._store_error("find", key, e) from e
        
        artifact = self._parse(key, raw)
        logger.debug("Artifact lookup", key=key, found=artifact is not None)
        return artifact
    
    async def upsert(self, artifact: Artifact) -> None:
        artifact_key = self._artifact_key(artifact.key)
        try:
            previous = self._parse(artifact.key, await self.redis.get(artifact_key))
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.set(artifact_key, artifact.model_dump_json(), ex=self.retention_seconds)
                if previous is not None and previous.schema_name != artifact.schema_name:
                    # A key is due under exactly one schema
                    pipe.zrem(self._index_key(previous.schema_name), artifact.key)
                pipe.zadd(
                    self._index_key(artifact.schema_name),
                    {artifact.key: artifact.next_refresh_at.timestamp()},
                )
                await pipe.execute()
        except RedisError as e:
            raise self._store_error("upsert", artifact.key, e) from e
        
        logger.info(
            "Saved artifact",
            key=artifact.key,
            schema=artifact.schema_name,
            status=artifact.status.value,
            next_refresh_at=artifact.next_refresh_at.isoformat(),
        )
    
    async def delete(self, key: str) -> bool:
        artifact_key = self._artifact_key(key)
        try:
            raw = await self.redis.get(artifact_key)
            existing = self._parse(key, raw)
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(artifact_key)
                if existing is not None:
                    pipe.zrem(self._index_key(existing.schema_name), key)
                results = await pipe.execute()
        except RedisError as e:
            raise self._store_error("delete", key, e) from e
        
        deleted = bool(results[0])
        logger.info("Deleted artifact" if deleted else "Artifact not found for deletion", key=key)
        return deleted
    
    async def list_due(
        self, now: datetime, limit: int, schema_name: Optional[str] = None
    ) -> list[Artifact]:
        if schema_name is None:
            index_keys = await self._index_keys()
        else:
            index_keys = [self._index_key(schema_name)]
        
        due: list[Artifact] = []
        try:
            for index_key in index_keys:
                indexed_schema = index_key[len(self.INDEX_PREFIX):]
                keys = await self.redis.zrangebyscore(
                    index_key, "-inf", now.timestamp(), start=0, num=limit
                )
                if not keys:
                    continue
                raws = await self.redis.mget([self._artifact_key(key) for key in keys])
                orphaned = []
                for key, raw in zip(keys, raws):
                    artifact = self._parse(key, raw)
                    # Expired (retention) or since stored under another schema
                    if artifact is None or artifact.schema_name != indexed_schema:
                        orphaned.append(key)
                    else:
                        due.append(artifact)
                if orphaned:
                    await self.redis.zrem(index_key, *orphaned)
        except RedisError as e:
            raise self._store_error("list_due", schema_name or "*", e) from e
        
        due.sort(key=lambda artifact: artifact.next_refresh_at)
        return due[:limit]
    
    async def _index_keys(self) -> list[str]:
        try:
            return [key async for key in self.redis.scan_iter(match=f"{self.INDEX_PREFIX}*")]
        except RedisError as e:
            raise self._store_error("list_due", "*", e) from e
    
    async def health_check(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.warning("Redis health check failed", error=str(e))
            return False
    
    async def close(self) -> None:
        await self.redis.aclose()
    
    @staticmethod
    def _store_error(operation: str, key: str, error: Exception) -> StoreError:
        details: dict[str, Any] = {"key": key, "error_type": type(error).__name__}
        logger.error(
            "Artifact store operation failed",
            operation=operation,
            key=key,
            error=str(error),
            error_type=type(error).__name__,
        )
        return StoreError(str(error) or type(error).__name__, operation=operation, details=details)
