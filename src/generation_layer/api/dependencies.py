"""
FastAPI dependency injection for the generation layer.

The orchestrator and request builder are process-wide singletons created
at startup (see main.py) and kept on ``app.state``; dependencies hand
them to the routes.
"""

from functools import lru_cache

from fastapi import Request

from generation_layer.config import Settings, settings
from generation_layer.domains.requests import RequestBuilder
from generation_layer.orchestration.orchestrator import Orchestrator


@lru_cache()
def get_settings() -> Settings:
    """Settings singleton."""
    return settings


def get_orchestrator(request: Request) -> Orchestrator:
    """Shared orchestrator (one in-flight registry per process)."""
    return request.app.state.orchestrator


def get_request_builder(request: Request) -> RequestBuilder:
    return request.app.state.request_builder
