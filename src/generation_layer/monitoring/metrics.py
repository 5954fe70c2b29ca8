"""Custom Prometheus metrics for the generation cache layer.

These metrics are exposed at /metrics and should be scraped by Prometheus.
Alert rules worth configuring:
- artifacts_produced_total{status="fallback"} (provider degraded)
- provider_calls_total{outcome="rate_limited"} (quota pressure)
- validation_failures_total (prompt/schema drift)
"""

from prometheus_client import Counter, Histogram

# === Cache Metrics ===

cache_lookups_total = Counter(
    "generation_cache_lookups_total",
    "Artifact store lookups by schema and outcome",
    ["schema", "outcome"],
)
"""
Labels:
- schema: industry_insights, interview_quiz, cover_letter, improvement_tip
- outcome: hit (servable), stale (due for refresh), miss (absent)
"""

single_flight_joins_total = Counter(
    "generation_single_flight_joins_total",
    "Callers that attached to an in-flight generation instead of starting one",
    ["schema"],
)

waiter_deadline_exceeded_total = Counter(
    "generation_waiter_deadline_exceeded_total",
    "Callers that stopped waiting for an in-flight generation",
    ["schema"],
)

artifacts_produced_total = Counter(
    "generation_artifacts_produced_total",
    "Artifacts returned by a generation, by resulting status",
    ["schema", "status"],
)
"""
Labels:
- status: fresh (provider success), stale (last resort), fallback (synthesized)

Alert thresholds:
- WARN: fallback ratio > 10% over 1h
"""

# === Provider Metrics ===

provider_calls_total = Counter(
    "provider_calls_total",
    "Provider generate() calls by outcome",
    ["model", "outcome"],
)
"""
Labels:
- outcome: success, rate_limited, unavailable, timeout, malformed, unknown
"""

provider_latency_seconds = Histogram(
    "provider_latency_seconds",
    "Provider call latency in seconds",
    ["model", "success"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0, 60.0],
)

retries_total = Counter(
    "provider_retries_total",
    "Retries scheduled by the retry policy, by error kind",
    ["kind"],
)

# === Validation Metrics ===

validation_failures_total = Counter(
    "validation_failures_total",
    "Validation failures by stage and error type",
    ["stage", "error_type"],
)
"""
Labels:
- stage: extract, coerce, conformance, text
- error_type: unparseable_response, missing_required_field, schema_mismatch
"""

validation_recoveries_total = Counter(
    "validation_recoveries_total",
    "Responses that needed a recovery strategy to parse",
    ["strategy"],
)
"""
Labels:
- strategy: fence_strip, brace_extract
"""
