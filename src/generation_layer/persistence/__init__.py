"""Artifact persistence layer."""

from .base import ArtifactStore
from .exceptions import StoreError
from .memory_store import InMemoryArtifactStore
from .redis_client import RedisClient
from .redis_store import RedisArtifactStore

__all__ = [
    "ArtifactStore",
    "InMemoryArtifactStore",
    "RedisArtifactStore",
    "RedisClient",
    "StoreError",
]
