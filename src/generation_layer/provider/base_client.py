"""
Abstract provider client.

The provider is an opaque function ``generate(prompt) -> text``. A client
performs exactly one attempt per call; retrying, validating and caching
are the caller's concern.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import structlog

logger = structlog.get_logger(__name__)


class BaseProviderClient(ABC):
    """
    Abstract base class for LLM provider clients.
    
    Responsibilities:
    - Send a single generation request to the provider
    - Return the raw generated text
    - Translate every failure into a classified ProviderError
    
    Does NOT handle:
    - Retries or backoff (RetryPolicy)
    - Parsing / validating the text (ResponseValidator)
    - Caching (Orchestrator / ArtifactStore)
    """
    
    def __init__(self, model: str, timeout: float = 30.0, **kwargs):
        """
        Initialize base client.
        
        Args:
            model: Provider model identifier
            timeout: Timeout for a single attempt in seconds
            **kwargs: Provider-specific configuration
        """
        self.model = model
        self.timeout = timeout
        self.extra_config = kwargs
        
        logger.info(
            "Initialized provider client",
            client_class=self.__class__.__name__,
            model=model,
            timeout=timeout,
        )
    
    @abstractmethod
    async def generate(
        self, prompt: str, response_schema: Optional[dict[str, Any]] = None
    ) -> str:
        """
        Generate text for ``prompt`` in a single attempt.
        
        Args:
            prompt: Fully rendered prompt
            response_schema: Optional JSON Schema hint for structured output
            
        Returns:
            Raw generated text (may contain fences or prose around JSON)
            
        Raises:
            ProviderError: Classified failure (rate limited, unavailable,
                timeout, malformed, unknown)
        """
    
    async def health_check(self) -> bool:
        """
        Lightweight reachability check. Must not raise.
        
        Default implementation reports healthy.
        """
        return True
    
    async def close(self) -> None:
        """Release connections. Default implementation does nothing."""
        logger.debug("Closing provider client", client_class=self.__class__.__name__)
    
    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model}, timeout={self.timeout}s)"
