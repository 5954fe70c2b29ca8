"""Deterministic fallback content."""

from generation_layer.fallback.bank import (
    improvement_tip_fallback,
    insights_fallback,
    quiz_fallback,
)
from generation_layer.fallback.synthesizer import FallbackSynthesizer, template_policy

__all__ = [
    "FallbackSynthesizer",
    "improvement_tip_fallback",
    "insights_fallback",
    "quiz_fallback",
    "template_policy",
]
