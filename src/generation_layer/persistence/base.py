"""
ArtifactStore interface.

Persists artifacts keyed by generation key. Implementations must make
``upsert`` atomic per key: concurrent readers see either the previous or
the new artifact, never a partial write.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from generation_layer.models.artifact import Artifact


class ArtifactStore(ABC):
    """Abstract artifact persistence. Every operation may raise StoreError."""
    
    @abstractmethod
    async def find(self, key: str) -> Optional[Artifact]:
        """Artifact stored under ``key``, or None."""
    
    @abstractmethod
    async def upsert(self, artifact: Artifact) -> None:
        """Insert or replace the artifact stored under ``artifact.key``."""
    
    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove the artifact under ``key``. Returns whether one existed."""
    
    @abstractmethod
    async def list_due(
        self, now: datetime, limit: int, schema_name: Optional[str] = None
    ) -> list[Artifact]:
        """
        Artifacts whose ``next_refresh_at`` is at or before ``now``.
        
        Ordered by ``next_refresh_at`` ascending (most overdue first).
        """
    
    async def health_check(self) -> bool:
        return True
    
    async def close(self) -> None:
        """Release connections."""
