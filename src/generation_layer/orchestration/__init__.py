"""Cache-aside orchestration with single-flight generation."""

from generation_layer.orchestration.exceptions import (
    InvalidKeyError,
    InvalidRequestError,
    OrchestrationError,
)
from generation_layer.orchestration.orchestrator import Orchestrator
from generation_layer.orchestration.single_flight import InFlightGeneration, SingleFlight

__all__ = [
    "InFlightGeneration",
    "InvalidKeyError",
    "InvalidRequestError",
    "OrchestrationError",
    "Orchestrator",
    "SingleFlight",
]
