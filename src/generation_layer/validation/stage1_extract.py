"""
Stage 1: JSON extraction.

Recover a JSON object from raw provider text. Strategies, in order:

    a. Strip markdown code fences and parse the remainder.
    b. Parse the substring from the first '{' to the last '}' (handles
       prose the provider emits before or after the object).

Hard-fail stage: raises UnparseableResponse when no strategy yields a
JSON object.
"""

import json
import re
from typing import Any

import structlog

from generation_layer.monitoring.metrics import (
    validation_failures_total,
    validation_recoveries_total,
)
from .exceptions import UnparseableResponse

logger = structlog.get_logger(__name__)

# Opening fence with an optional language tag, and closing fence
_FENCE_OPEN = re.compile(r"```[\w-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?[ \t]*```")


def strip_fences(text: str) -> str:
    """Remove markdown code-fence markers and surrounding whitespace."""
    cleaned = _FENCE_OPEN.sub("", text, count=1) if "```" in text else text
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


class Stage1Extract:
    """Stage 1 validator: raw text -> JSON object."""
    
    def extract(self, raw_text: str) -> dict[str, Any]:
        """
        Extract a JSON object from raw provider text.
        
        Args:
            raw_text: Text as returned by the provider
        
        Returns:
            Parsed JSON object
        
        Raises:
            UnparseableResponse: If no strategy yields a JSON object
        """
        if not raw_text or not raw_text.strip():
            validation_failures_total.labels(
                stage="extract", error_type="empty_content"
            ).inc()
            raise UnparseableResponse(
                "Provider response is empty or whitespace-only",
                raw_content=raw_text,
                parse_error="Empty content",
            )
        
        cleaned = strip_fences(raw_text)
        
        # Strategy a: parse the fence-stripped text directly
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as e:
            first_error = f"{e.msg} at line {e.lineno} col {e.colno}"
        except (ValueError, RecursionError) as e:
            # Integer digit limit, pathological nesting
            first_error = str(e)[:200] or type(e).__name__
        else:
            if isinstance(parsed, dict):
                if cleaned != raw_text.strip():
                    validation_recoveries_total.labels(strategy="fence_strip").inc()
                return parsed
            first_error = f"Expected JSON object, got {type(parsed).__name__}"
        
        # Strategy b: first '{' to last '}'
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            validation_failures_total.labels(
                stage="extract", error_type="no_json_object"
            ).inc()
            raise UnparseableResponse(
                "Provider response contains no JSON object",
                raw_content=raw_text,
                parse_error=first_error,
            )
        
        candidate = cleaned[start:end + 1]
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            validation_failures_total.labels(
                stage="extract", error_type="json_decode_error"
            ).inc()
            raise UnparseableResponse(
                f"Failed to parse provider response as JSON: {e.msg}",
                raw_content=raw_text,
                parse_error=f"{e.msg} at line {e.lineno} col {e.colno}",
            ) from e
        except (ValueError, RecursionError) as e:
            validation_failures_total.labels(
                stage="extract", error_type="json_decode_error"
            ).inc()
            raise UnparseableResponse(
                "Failed to parse provider response as JSON",
                raw_content=raw_text,
                parse_error=str(e)[:200] or type(e).__name__,
            ) from e
        
        if not isinstance(parsed, dict):
            validation_failures_total.labels(
                stage="extract", error_type="not_json_object"
            ).inc()
            raise UnparseableResponse(
                f"Provider response is not a JSON object (got {type(parsed).__name__})",
                raw_content=raw_text,
            )
        
        validation_recoveries_total.labels(strategy="brace_extract").inc()
        logger.debug(
            "Recovered JSON object from surrounding prose",
            leading_chars=start,
            trailing_chars=len(cleaned) - end - 1,
        )
        return parsed
