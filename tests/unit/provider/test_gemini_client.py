"""Unit tests for GeminiClient (httpx.MockTransport, no network)."""

import json

import httpx
import pytest

from generation_layer.provider.exceptions import (
    ProviderError,
    ProviderMalformedResponseError,
    ProviderNotConfiguredError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from generation_layer.provider.gemini_client import GeminiClient


def envelope(text: str, finish_reason: str = "STOP") -> dict:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": finish_reason}
        ]
    }


def make_client(handler, api_key="test-key") -> GeminiClient:
    return GeminiClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://gemini.test",
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestGenerate:
    
    @pytest.mark.asyncio
    async def test_returns_candidate_text(self):
        captured = {}
        
        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = request.url
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=envelope('{"growthRate": 5}'))
        
        client = make_client(handler)
        text = await client.generate("Analyze healthcare", response_schema={"type": "object"})
        await client.close()
        
        assert text == '{"growthRate": 5}'
        assert captured["url"].path == "/v1beta/models/gemini-test:generateContent"
        assert captured["url"].params["key"] == "test-key"
        assert captured["body"]["contents"][0]["parts"][0]["text"] == "Analyze healthcare"
        assert captured["body"]["generationConfig"]["responseMimeType"] == "application/json"
    
    @pytest.mark.asyncio
    async def test_text_request_has_no_json_mime_type(self):
        captured = {}
        
        def handler(request):
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json=envelope("Dear Hiring Manager"))
        
        client = make_client(handler)
        await client.generate("Write a letter")
        
        assert "responseMimeType" not in captured["body"]["generationConfig"]
    
    @pytest.mark.asyncio
    async def test_multiple_parts_are_joined(self):
        def handler(request):
            body = {"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}]}
            return httpx.Response(200, json=body)
        
        assert await make_client(handler).generate("p") == "Hello world"
    
    @pytest.mark.asyncio
    async def test_missing_api_key_fails_without_request(self):
        calls = []
        
        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=envelope("x"))
        
        client = make_client(handler, api_key=None)
        
        with pytest.raises(ProviderNotConfiguredError) as exc_info:
            await client.generate("p")
        
        assert not exc_info.value.is_transient
        assert calls == []


class TestFailureMapping:
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_class",
        [
            (429, ProviderRateLimitError),
            (500, ProviderUnavailableError),
            (503, ProviderUnavailableError),
            (504, ProviderTimeoutError),
        ],
    )
    async def test_transient_http_statuses(self, status, error_class):
        client = make_client(lambda request: httpx.Response(status, text="error"))
        
        with pytest.raises(error_class) as exc_info:
            await client.generate("p")
        
        assert exc_info.value.is_transient
        assert exc_info.value.details["status"] == status
    
    @pytest.mark.asyncio
    async def test_bad_request_with_quota_message_is_rate_limited(self):
        client = make_client(
            lambda request: httpx.Response(400, json={"error": {"status": "RESOURCE_EXHAUSTED"}})
        )
        
        with pytest.raises(ProviderRateLimitError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    async def test_forbidden_is_unknown_and_not_transient(self):
        client = make_client(lambda request: httpx.Response(403, text="API key not valid"))
        
        with pytest.raises(ProviderError) as exc_info:
            await client.generate("p")
        
        assert not exc_info.value.is_transient
    
    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)
        
        with pytest.raises(ProviderTimeoutError):
            await make_client(handler).generate("p")
    
    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        
        with pytest.raises(ProviderUnavailableError):
            await make_client(handler).generate("p")
    
    @pytest.mark.asyncio
    async def test_non_json_body_is_malformed(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        
        with pytest.raises(ProviderMalformedResponseError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    async def test_blocked_prompt_is_malformed(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"promptFeedback": {"blockReason": "SAFETY"}})
        )
        
        with pytest.raises(ProviderMalformedResponseError) as exc_info:
            await client.generate("p")
        
        assert exc_info.value.details["block_reason"] == "SAFETY"
    
    @pytest.mark.asyncio
    async def test_no_candidates_is_malformed(self):
        client = make_client(lambda request: httpx.Response(200, json={"candidates": []}))
        
        with pytest.raises(ProviderMalformedResponseError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    async def test_safety_stop_without_text_is_malformed(self):
        body = {"candidates": [{"content": {"parts": []}, "finishReason": "SAFETY"}]}
        client = make_client(lambda request: httpx.Response(200, json=body))
        
        with pytest.raises(ProviderMalformedResponseError) as exc_info:
            await client.generate("p")
        
        assert exc_info.value.details["finish_reason"] == "SAFETY"
    
    @pytest.mark.asyncio
    async def test_blank_text_is_malformed(self):
        client = make_client(lambda request: httpx.Response(200, json=envelope("   ")))
        
        with pytest.raises(ProviderMalformedResponseError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": [{"content": {"parts": [{"text": None}]}}]},
            {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
            {"candidates": {"0": "x"}},
            {"candidates": ["not an object"]},
            {"candidates": [{"content": "text"}]},
            {"candidates": [{"content": {"parts": {"text": "x"}}}]},
            {"candidates": [{"content": {"parts": []}, "finishReason": ["SAFETY"]}]},
            {"promptFeedback": ["blocked"]},
            ["not", "an", "object"],
        ],
        ids=[
            "null-text",
            "numeric-text",
            "candidates-mapping",
            "candidate-string",
            "content-string",
            "parts-mapping",
            "finish-reason-list",
            "feedback-list",
            "top-level-list",
        ],
    )
    async def test_unexpected_envelope_shape_is_malformed(self, body):
        client = make_client(lambda request: httpx.Response(200, json=body))
        
        with pytest.raises(ProviderMalformedResponseError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    async def test_undecodable_body_is_malformed(self):
        client = make_client(
            lambda request: httpx.Response(
                200, content=b'\x80\x81{"x"', headers={"content-type": "application/json"}
            )
        )
        
        with pytest.raises(ProviderMalformedResponseError):
            await client.generate("p")
    
    @pytest.mark.asyncio
    async def test_content_decoding_error_is_malformed(self):
        def handler(request):
            raise httpx.DecodingError("invalid gzip stream", request=request)
        
        with pytest.raises(ProviderMalformedResponseError):
            await make_client(handler).generate("p")
    
    @pytest.mark.asyncio
    async def test_redirect_loop_is_unavailable(self):
        def handler(request):
            raise httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=request)
        
        with pytest.raises(ProviderUnavailableError):
            await make_client(handler).generate("p")


class TestHealthCheck:
    
    @pytest.mark.asyncio
    async def test_healthy(self):
        client = make_client(lambda request: httpx.Response(200, json={"name": "models/gemini-test"}))
        
        assert await client.health_check() is True
    
    @pytest.mark.asyncio
    async def test_unhealthy_on_error_status(self):
        client = make_client(lambda request: httpx.Response(500))
        
        assert await client.health_check() is False
    
    @pytest.mark.asyncio
    async def test_unconfigured_is_unhealthy(self):
        client = make_client(lambda request: httpx.Response(200), api_key="")
        
        assert await client.health_check() is False
    
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        client = make_client(lambda request: httpx.Response(200, json=envelope("x")))
        await client.generate("p")
        
        await client.close()
        await client.close()
        
        assert client._client.is_closed
