"""Monitoring and metrics instrumentation for the generation cache layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from generation_layer.monitoring.metrics import (
    artifacts_produced_total,
    cache_lookups_total,
    provider_calls_total,
    provider_latency_seconds,
    retries_total,
    single_flight_joins_total,
    validation_failures_total,
    validation_recoveries_total,
    waiter_deadline_exceeded_total,
)

__all__ = [
    "artifacts_produced_total",
    "cache_lookups_total",
    "provider_calls_total",
    "provider_latency_seconds",
    "retries_total",
    "single_flight_joins_total",
    "validation_failures_total",
    "validation_recoveries_total",
    "waiter_deadline_exceeded_total",
]
