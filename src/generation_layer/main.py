"""
FastAPI application entry point for the generation layer.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from generation_layer.api.error_handlers import EXCEPTION_HANDLERS
from generation_layer.api.middleware import RequestTracingMiddleware
from generation_layer.api.routes import router
from generation_layer.config import settings
from generation_layer.domains.requests import RequestBuilder
from generation_layer.logging_config import configure_logging
from generation_layer.orchestration.factory import build_orchestrator, build_prompt_builder
from generation_layer.persistence.redis_client import RedisClient

# Configure structured logging before any other imports
configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
logger = structlog.get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Cached, single-flight AI content generation for career assistance",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Request tracing middleware (must be first for request_id in all logs)
app.add_middleware(RequestTracingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for exc_class, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_class, handler)

app.include_router(router)


@app.on_event("startup")
async def startup():
    """Build the shared orchestrator and check its dependencies."""
    logger.info(
        "Application startup",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        model=settings.GEMINI_MODEL,
        store_backend=settings.STORE_BACKEND,
    )
    
    prompt_builder = build_prompt_builder(settings)
    app.state.request_builder = RequestBuilder(prompt_builder, settings)
    app.state.orchestrator = build_orchestrator(settings)
    
    if await app.state.orchestrator.store.health_check():
        logger.info("Artifact store reachable")
    else:
        logger.error("Artifact store unreachable, requests will fail until it recovers")
    
    if settings.GEMINI_API_KEY and not await app.state.orchestrator.provider.health_check():
        logger.warning("Provider health check failed, content will fall back")
    
    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown():
    """Let background generations finish, then release connections."""
    logger.info("Application shutdown")
    orchestrator = getattr(app.state, "orchestrator", None)
    if orchestrator is not None:
        await orchestrator.shutdown()
        await orchestrator.provider.close()
        await orchestrator.store.close()
    await RedisClient.close_async_pool()
    logger.info("Application shutdown complete")


if settings.PROMETHEUS_ENABLED:
    Instrumentator().instrument(app).expose(app)


@app.get("/")
async def root():
    """Service info with documentation links."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics" if settings.PROMETHEUS_ENABLED else None,
    }


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "generation_layer.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
