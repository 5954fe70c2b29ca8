"""Shared test fixtures and configuration for all tests.

Provides settings, sample provider payloads and a controllable clock.
"""

import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import pytest

# The API module builds its store at startup; keep tests off Redis
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from generation_layer.config import Settings  # noqa: E402


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.
    
    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.SERVE_STALE_ON_FAILURE = False
    """
    return Settings(
        _env_file=None,
        # === Application ===
        APP_NAME="Career Generation Layer (Test)",
        APP_VERSION="0.1.0",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        
        # === Provider ===
        GEMINI_API_KEY=None,
        GEMINI_MODEL="gemini-test",
        
        # === Retry ===
        MAX_ATTEMPTS=3,
        RETRY_BASE_DELAY=0.5,
        RETRY_MULTIPLIER=2.0,
        RETRY_JITTER=0.0,
        VALIDATION_ATTEMPTS=2,
        
        # === Refresh policy ===
        FRESH_TTL_SECONDS=7 * 24 * 3600,
        FALLBACK_TTL_SECONDS=3600,
        SERVE_STALE_ON_FAILURE=True,
        STALE_WHILE_REVALIDATE_SECONDS=0,
        REQUEST_DEADLINE_SECONDS=5.0,
        
        # === Store ===
        STORE_BACKEND="memory",
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
        
        PROMETHEUS_ENABLED=False,
    )


class MutableClock:
    """Callable UTC clock that tests can move forward."""
    
    def __init__(self, start: datetime = None):
        self.now = start or datetime(2026, 1, 4, 12, 0, tzinfo=timezone.utc)
    
    def __call__(self) -> datetime:
        return self.now
    
    def advance(self, **delta) -> datetime:
        self.now = self.now + timedelta(**delta)
        return self.now


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def insights_payload() -> Dict[str, Any]:
    """A complete, valid industry insights object."""
    return {
        "salaryRanges": [
            {"role": "Registered Nurse", "min": 60000, "max": 95000, "median": 77000, "location": "US"},
            {"role": "Health Data Analyst", "min": 65000, "max": 110000, "median": 85000, "location": "US"},
        ],
        "growthRate": 5.2,
        "demandLevel": "HIGH",
        "topSkills": ["Patient care", "EHR systems", "Data analysis"],
        "recommendedSkills": ["Telehealth", "HIPAA compliance"],
        "marketOutlook": "POSITIVE",
        "keyTrends": ["Telemedicine", "AI diagnostics"],
    }


def make_question(index: int, option_count: int = 4) -> Dict[str, Any]:
    options = [f"Option {index}-{n}" for n in range(1, option_count + 1)]
    return {
        "question": f"Question number {index}?",
        "options": options,
        "correctAnswer": options[0],
        "explanation": f"Explanation {index}",
    }


@pytest.fixture
def quiz_payload() -> Dict[str, Any]:
    """A valid quiz with 10 questions of 4 options."""
    return {"questions": [make_question(i) for i in range(1, 11)]}


@pytest.fixture
def insights_json(insights_payload) -> str:
    return json.dumps(insights_payload)


@pytest.fixture
def quiz_json(quiz_payload) -> str:
    return json.dumps(quiz_payload)
