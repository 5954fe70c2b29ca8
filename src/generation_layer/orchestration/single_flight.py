"""
Single-flight registry of in-progress generations.

At most one generation task exists per key. Callers that arrive while a
generation is running attach to it and observe the same outcome.

Registration and lookup contain no suspension points, so check-then-create
is atomic on the event loop without a lock. The entry is removed when the
task finishes, whether or not anyone is still waiting on it.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class InFlightGeneration:
    """A running generation for one key."""
    
    key: str
    task: asyncio.Task
    started_at: float = field(default_factory=time.monotonic)
    waiters: int = 1


class SingleFlight:
    """Per-key registry of generation tasks."""
    
    def __init__(self):
        self._in_flight: dict[str, InFlightGeneration] = {}
    
    def join_or_start(
        self, key: str, start: Callable[[], Awaitable[Any]]
    ) -> tuple[InFlightGeneration, bool]:
        """
        Attach to the generation for ``key``, starting one if none runs.
        
        Args:
            key: Generation key
            start: Zero-argument coroutine factory, only called when no
                generation is in flight for ``key``
        
        Returns:
            Tuple of (in-flight generation, whether this call started it)
        """
        flight = self._in_flight.get(key)
        if flight is not None:
            flight.waiters += 1
            return flight, False
        
        task = asyncio.ensure_future(start())
        flight = InFlightGeneration(key=key, task=task)
        self._in_flight[key] = flight
        task.add_done_callback(lambda finished: self._finish(flight, finished))
        logger.debug("Started generation", key=key, in_flight=len(self._in_flight))
        return flight, True
    
    def get(self, key: str) -> Optional[InFlightGeneration]:
        return self._in_flight.get(key)
    
    def _finish(self, flight: InFlightGeneration, task: asyncio.Task) -> None:
        if self._in_flight.get(flight.key) is flight:
            del self._in_flight[flight.key]
        
        if task.cancelled():
            logger.warning("Generation cancelled", key=flight.key)
            return
        # Mark the exception retrieved; waiters re-raise it themselves
        error = task.exception()
        logger.debug(
            "Generation finished",
            key=flight.key,
            waiters=flight.waiters,
            duration_ms=int((time.monotonic() - flight.started_at) * 1000),
            failed=error is not None,
        )
    
    async def drain(self) -> None:
        """Wait for every in-flight generation to finish."""
        while self._in_flight:
            tasks = [flight.task for flight in self._in_flight.values()]
            await asyncio.gather(*tasks, return_exceptions=True)
            # Let done-callbacks unregister the finished tasks
            await asyncio.sleep(0)
    
    def __contains__(self, key: str) -> bool:
        return key in self._in_flight
    
    def __len__(self) -> int:
        return len(self._in_flight)
