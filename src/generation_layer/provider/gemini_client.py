"""
Gemini client implementation.

Talks to the Generative Language REST API with an httpx AsyncClient:
- POST /v1beta/models/{model}:generateContent
- GET  /v1beta/models/{model} (health check)

Every failure is mapped onto a ProviderError subclass; no retries happen
here.
"""

import time
from typing import Any, Optional

import httpx
import structlog

from generation_layer.provider.base_client import BaseProviderClient
from generation_layer.provider.classification import classify_failure
from generation_layer.provider.exceptions import (
    ProviderError,
    ProviderMalformedResponseError,
    ProviderNotConfiguredError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    error_for_kind,
)
from generation_layer.monitoring.metrics import provider_calls_total, provider_latency_seconds

logger = structlog.get_logger(__name__)

_BLOCKING_FINISH_REASONS = {"SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT"}


def _expect(value: Any, expected: type, field: str) -> Any:
    """Return ``value`` (an empty ``expected`` when missing) or reject its shape."""
    if value is None:
        return expected()
    if not isinstance(value, expected):
        raise ProviderMalformedResponseError(
            f"Gemini field '{field}' has unexpected type",
            details={"field": field, "type": type(value).__name__},
        )
    return value


class GeminiClient(BaseProviderClient):
    """
    Gemini REST client using a persistent httpx.AsyncClient.
    
    The API key is sent as the ``key`` query parameter. When no key is
    configured ``generate`` fails immediately with ProviderNotConfiguredError
    (non-retryable), so callers degrade to fallback content without
    touching the network.
    """
    
    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com",
        timeout: float = 30.0,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini client.
        
        Args:
            api_key: Generative Language API key (None disables calls)
            model: Model name, e.g. "gemini-1.5-flash"
            base_url: API root
            timeout: Single-attempt timeout in seconds
            temperature: Sampling temperature
            max_output_tokens: Generation length cap
            connection_limits: httpx pool limits
            transport: Custom transport (tests use httpx.MockTransport)
        """
        super().__init__(model=model, timeout=timeout)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=5,
            max_connections=20,
            keepalive_expiry=30.0,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
    
    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)
    
    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the pooled async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient", base_url=self.base_url)
        return self._client
    
    def _build_payload(
        self, prompt: str, response_schema: Optional[dict[str, Any]]
    ) -> dict[str, Any]:
        generation_config: dict[str, Any] = {
            "temperature": self.temperature,
            "maxOutputTokens": self.max_output_tokens,
        }
        if response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
        return {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
    
    async def generate(
        self, prompt: str, response_schema: Optional[dict[str, Any]] = None
    ) -> str:
        """
        Single generateContent call.
        
        Response shape:
        {
            "candidates": [
                {"content": {"parts": [{"text": "..."}]}, "finishReason": "STOP"}
            ],
            "promptFeedback": {"blockReason": "..."}   # only when blocked
        }
        """
        if not self.is_configured:
            provider_calls_total.labels(model=self.model, outcome="unknown").inc()
            raise ProviderNotConfiguredError(
                "Gemini API key is not configured",
                details={"model": self.model},
            )
        
        start_time = time.perf_counter()
        try:
            text = await self._request(prompt, response_schema)
        except ProviderError as exc:
            self._observe(start_time, success=False, outcome=exc.kind.value)
            logger.warning(
                "Gemini generation failed",
                model=self.model,
                kind=exc.kind.value,
                error=exc.message,
            )
            raise
        
        self._observe(start_time, success=True, outcome="success")
        logger.info(
            "Gemini generation successful",
            model=self.model,
            prompt_length=len(prompt),
            response_length=len(text),
            latency_ms=int((time.perf_counter() - start_time) * 1000),
        )
        return text
    
    async def _request(
        self, prompt: str, response_schema: Optional[dict[str, Any]]
    ) -> str:
        client = await self._get_client()
        try:
            response = await client.post(
                f"/v1beta/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=self._build_payload(prompt, response_schema),
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise ProviderTimeoutError(
                f"Request timeout after {self.timeout}s",
                details={"timeout": self.timeout, "error_type": type(e).__name__},
            ) from e
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            body = e.response.text[:500]
            kind = classify_failure(status_code, body)
            raise error_for_kind(
                kind,
                f"Gemini returned HTTP {status_code}",
                details={"status": status_code, "body": body},
            ) from e
        except httpx.DecodingError as e:
            raise ProviderMalformedResponseError(
                "Gemini response body could not be decoded",
                details={"error_type": type(e).__name__},
            ) from e
        except httpx.HTTPError as e:
            # Transport failures and redirect loops
            raise ProviderUnavailableError(
                f"Network error: {e}",
                details={"error_type": type(e).__name__},
            ) from e
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError from response.json()
            raise ProviderMalformedResponseError(
                "Gemini response body is not JSON",
                details={"parse_error": str(e)[:200]},
            ) from e
        
        return self._extract_text(data)
    
    def _extract_text(self, data: Any) -> str:
        """Pull the generated text out of a generateContent envelope."""
        if not isinstance(data, dict):
            raise ProviderMalformedResponseError("Gemini response is not a JSON object")
        
        feedback = _expect(data.get("promptFeedback"), dict, "promptFeedback")
        block_reason = feedback.get("blockReason")
        if block_reason:
            raise ProviderMalformedResponseError(
                f"Prompt blocked by provider: {block_reason}",
                details={"block_reason": str(block_reason)},
            )
        
        candidates = _expect(data.get("candidates"), list, "candidates")
        if not candidates:
            raise ProviderMalformedResponseError("Gemini returned no candidates")
        
        candidate = _expect(candidates[0], dict, "candidate")
        finish_reason = candidate.get("finishReason")
        content = _expect(candidate.get("content"), dict, "content")
        parts = _expect(content.get("parts"), list, "parts")
        
        chunks = []
        for part in parts:
            if not isinstance(part, dict):
                continue
            chunk = part.get("text")
            if chunk is None:
                continue
            if not isinstance(chunk, str):
                raise ProviderMalformedResponseError(
                    "Gemini part text is not a string",
                    details={"type": type(chunk).__name__},
                )
            chunks.append(chunk)
        text = "".join(chunks)
        
        blocked = isinstance(finish_reason, str) and finish_reason in _BLOCKING_FINISH_REASONS
        if blocked and not text:
            raise ProviderMalformedResponseError(
                f"Generation stopped: {finish_reason}",
                details={"finish_reason": finish_reason},
            )
        if not text.strip():
            raise ProviderMalformedResponseError(
                "Empty response from Gemini",
                details={"finish_reason": finish_reason},
            )
        return text
    
    def _observe(self, start_time: float, success: bool, outcome: str) -> None:
        provider_latency_seconds.labels(
            model=self.model, success=str(success).lower()
        ).observe(time.perf_counter() - start_time)
        provider_calls_total.labels(model=self.model, outcome=outcome).inc()
    
    async def health_check(self) -> bool:
        """GET the model resource; False on any failure."""
        if not self.is_configured:
            return False
        try:
            client = await self._get_client()
            response = await client.get(
                f"/v1beta/models/{self.model}",
                params={"key": self.api_key},
                timeout=5.0,
            )
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.warning("Gemini health check failed", error=str(e))
            return False
    
    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed Gemini client connection")
    
    async def __aenter__(self) -> "GeminiClient":
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
