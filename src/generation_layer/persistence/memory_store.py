"""
In-process artifact store.

Used for tests and for single-process deployments (STORE_BACKEND=memory).
No operation suspends, so each one is atomic on the event loop.
"""

from datetime import datetime
from typing import Optional

import structlog

from generation_layer.models.artifact import Artifact
from .base import ArtifactStore

logger = structlog.get_logger(__name__)


class InMemoryArtifactStore(ArtifactStore):
    """Dict-backed ArtifactStore."""
    
    def __init__(self):
        self._artifacts: dict[str, Artifact] = {}
    
    async def find(self, key: str) -> Optional[Artifact]:
        return self._artifacts.get(key)
    
    async def upsert(self, artifact: Artifact) -> None:
        self._artifacts[artifact.key] = artifact
        logger.debug("Stored artifact", key=artifact.key, status=artifact.status.value)
    
    async def delete(self, key: str) -> bool:
        return self._artifacts.pop(key, None) is not None
    
    async def list_due(
        self, now: datetime, limit: int, schema_name: Optional[str] = None
    ) -> list[Artifact]:
        due = [
            artifact
            for artifact in self._artifacts.values()
            if artifact.is_due(now) and (schema_name is None or artifact.schema_name == schema_name)
        ]
        due.sort(key=lambda artifact: artifact.next_refresh_at)
        return due[:limit]
    
    def __len__(self) -> int:
        return len(self._artifacts)
