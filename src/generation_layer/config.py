"""
Configuration settings for the generation cache layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    # === Application ===
    APP_NAME: str = "Career Generation Layer"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    
    # === Provider (Gemini) ===
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com"
    GEMINI_MODEL: str = "gemini-1.5-flash"
    PROVIDER_TIMEOUT: float = 30.0  # seconds, single attempt
    PROVIDER_TEMPERATURE: float = 0.7
    PROVIDER_MAX_OUTPUT_TOKENS: int = 2048
    
    # === Retry ===
    MAX_ATTEMPTS: int = 3
    RETRY_BASE_DELAY: float = 0.5  # seconds before the second attempt
    RETRY_MULTIPLIER: float = 2.0
    RETRY_JITTER: float = 0.1  # max random seconds added to each backoff
    VALIDATION_ATTEMPTS: int = 2  # generation rounds when output fails validation
    
    # === Refresh policy ===
    FRESH_TTL_SECONDS: int = 7 * 24 * 3600
    FALLBACK_TTL_SECONDS: int = 3600
    SERVE_STALE_ON_FAILURE: bool = True
    STALE_WHILE_REVALIDATE_SECONDS: int = 0  # 0 disables serving stale while refreshing
    REQUEST_DEADLINE_SECONDS: float = 30.0
    
    # === Artifact store ===
    STORE_BACKEND: str = "redis"  # "redis" or "memory"
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50
    REDIS_SOCKET_TIMEOUT: float = 5.0
    ARTIFACT_KEY_PREFIX: str = "artifact:"
    ARTIFACT_RETENTION_SECONDS: int = 30 * 24 * 3600
    
    # === Celery (background refresh) ===
    CELERY_BROKER_URL: str = "redis://redis:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/2"
    CELERY_TASK_TIME_LIMIT: int = 600
    REFRESH_BATCH_LIMIT: int = 5
    
    # === Prompts & content ===
    PROMPT_TEMPLATES_DIR: Optional[str] = None  # defaults to the packaged templates
    LETTER_SOFT_MAX_WORDS: int = 400
    TIP_SOFT_MAX_WORDS: int = 60
    
    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True


# Global settings instance
settings = Settings()
