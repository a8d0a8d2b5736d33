"""Tests for the JSON completion client: parsing, classification and retries."""

from unittest.mock import AsyncMock

import httpx
import pytest

from conftest import make_client, mock_completion
from config import LLMConfig
from errors import ErrorCode, ServiceError
from services.llm_json import (
    LLMJsonClient,
    classify_error,
    is_timeout_error,
    parse_json_text,
    strip_code_fence,
)


class ProviderError(Exception):
    def __init__(self, message, status_code=None, code=None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class TestParsing:
    def test_fenced_json_parses_like_unfenced(self):
        body = '{"caseNumber": "（2024）苏01民初1234号", "cause": null}'
        fenced = f"```json\n{body}\n```"
        assert parse_json_text(fenced) == parse_json_text(body)

    def test_bare_fence_is_stripped(self):
        assert strip_code_fence("```\n[1, 2]\n```") == "[1, 2]"

    def test_invalid_json_message_contains_text(self):
        with pytest.raises(ServiceError) as exc_info:
            parse_json_text("```json\nnot json\n```")

        assert exc_info.value.code == ErrorCode.INVALID_JSON.value
        assert exc_info.value.status == 502
        assert "not json" in exc_info.value.message


class TestClassification:
    def test_rate_limit(self):
        error = classify_error(ProviderError("quota exceeded", status_code=429))
        assert (error.code, error.status) == ("RATE_LIMIT", 429)

    @pytest.mark.parametrize(
        "exc",
        [
            httpx.ReadTimeout("read timed out"),
            TimeoutError(),
            ProviderError("gateway", status_code=504),
            ProviderError("connection", code="ECONNABORTED"),
            ProviderError("Request was aborted by the client"),
        ],
    )
    def test_timeouts(self, exc):
        assert is_timeout_error(exc)
        error = classify_error(exc)
        assert (error.code, error.status) == ("TIMEOUT", 504)

    def test_server_error_is_upstream(self):
        error = classify_error(ProviderError("service unavailable", status_code=503))
        assert (error.code, error.status) == ("UPSTREAM_ERROR", 502)

    def test_client_error_keeps_status(self):
        error = classify_error(ProviderError("bad key", status_code=401))
        assert (error.code, error.status) == ("REQUEST_FAILED", 401)

    def test_unknown_error_defaults_to_500(self):
        error = classify_error(ValueError("boom"))
        assert (error.code, error.status) == ("REQUEST_FAILED", 500)


class TestComplete:
    @pytest.mark.asyncio
    async def test_returns_parsed_json(self):
        completion = mock_completion({"ok": True})
        client = make_client(completion)

        assert await client.complete("prompt") == {"ok": True}

        kwargs = completion.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]

    @pytest.mark.asyncio
    async def test_model_override(self):
        completion = mock_completion({})
        client = make_client(completion)

        await client.complete("prompt", model="other-model")

        assert completion.await_args.kwargs["model"] == "other-model"

    @pytest.mark.asyncio
    async def test_credentials_passed_when_configured(self):
        completion = mock_completion({})
        client = LLMJsonClient(
            LLMConfig(model="m", api_key="sk-test", api_base="http://gateway"),
            completion,
        )

        await client.complete("prompt")

        kwargs = completion.await_args.kwargs
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["api_base"] == "http://gateway"

    @pytest.mark.asyncio
    async def test_timeout_once_then_success(self):
        completion = mock_completion(httpx.ReadTimeout("timed out"), {"ok": True})
        client = make_client(completion)

        assert await client.complete("prompt") == {"ok": True}
        assert completion.await_count == 2

    @pytest.mark.asyncio
    async def test_rate_limit_is_not_retried(self):
        completion = mock_completion(
            ProviderError("slow down", status_code=429), {"ok": True}
        )
        client = make_client(completion)

        with pytest.raises(ServiceError) as exc_info:
            await client.complete("prompt")

        assert exc_info.value.code == "RATE_LIMIT"
        assert completion.await_count == 1

    @pytest.mark.asyncio
    async def test_invalid_json_is_not_retried(self):
        completion = mock_completion("I cannot answer that", {"ok": True})
        client = make_client(completion)

        with pytest.raises(ServiceError) as exc_info:
            await client.complete("prompt")

        assert exc_info.value.code == "INVALID_JSON"
        assert completion.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_exhausted(self):
        completion = mock_completion(*[httpx.ReadTimeout("timed out")] * 3)
        client = make_client(completion, max_retries=2)

        with pytest.raises(ServiceError) as exc_info:
            await client.complete("prompt")

        error = exc_info.value
        assert (error.code, error.status) == ("RETRIES_EXHAUSTED", 504)
        assert error.error.details["attempts"] == 3
        assert error.error.details["last_error"]["code"] == "TIMEOUT"
        assert completion.await_count == 3

    @pytest.mark.asyncio
    async def test_backoff_doubles(self, monkeypatch):
        sleep = AsyncMock()
        monkeypatch.setattr("services.llm_json.asyncio.sleep", sleep)
        completion = mock_completion(*[httpx.ReadTimeout("timed out")] * 3)
        client = LLMJsonClient(
            LLMConfig(model="m", max_retries=2, retry_backoff_seconds=0.5), completion
        )

        with pytest.raises(ServiceError):
            await client.complete("prompt")

        assert [call.args[0] for call in sleep.await_args_list] == [0.5, 1.0]
