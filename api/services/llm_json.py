"""
LLM JSON Client.

Wraps one JSON-mode completion call: strips markdown fences, parses the
JSON body, classifies failures into the canonical error codes and retries
timeouts with exponential backoff. Knows nothing about summonses.
"""

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable

import httpx
from litellm import acompletion

from config import LLMConfig
from errors import ErrorCode, ServiceError

logger = logging.getLogger(__name__)

CompletionFn = Callable[..., Awaitable[Any]]

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")

_TIMEOUT_STATUSES = {408, 504}
_TIMEOUT_CODES = {"ETIMEDOUT", "TIMEOUT", "ECONNABORTED"}
_TIMEOUT_PHRASES = ("timeout", "timed out", "aborted")


def strip_code_fence(text: str) -> str:
    """Remove a leading ```/```json fence and a trailing ``` fence."""
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    cleaned = _FENCE_CLOSE.sub("", cleaned)
    return cleaned.strip()


def parse_json_text(raw_text: str) -> Any:
    """
    Parse a model response into a JSON value.

    Raises:
        ServiceError: INVALID_JSON (502) with the offending text in the message.
    """
    normalized = strip_code_fence(raw_text)
    try:
        return json.loads(normalized)
    except json.JSONDecodeError as e:
        raise ServiceError(
            ErrorCode.INVALID_JSON,
            502,
            f"Failed to parse model JSON: {normalized}",
            details={"reason": str(e)},
        ) from e


def _error_status(exc: BaseException) -> int | None:
    """Best-effort HTTP status of a provider/transport exception."""
    for attr in ("status_code", "status", "http_status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value

    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def is_timeout_error(exc: BaseException) -> bool:
    """Timeout statuses, timeout codes, timeout exceptions or timeout wording."""
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return True

    if _error_status(exc) in _TIMEOUT_STATUSES:
        return True

    code = getattr(exc, "code", None)
    if isinstance(code, str) and code.upper() in _TIMEOUT_CODES:
        return True

    message = str(exc).lower()
    return any(phrase in message for phrase in _TIMEOUT_PHRASES)


def classify_error(exc: BaseException) -> ServiceError:
    """Map a provider/transport failure onto the canonical taxonomy."""
    status = _error_status(exc)
    details = {"exception": type(exc).__name__, "reason": str(exc)[:500]}

    if status == 429:
        return ServiceError(
            ErrorCode.RATE_LIMIT,
            429,
            "LLM provider rate limit reached or quota exhausted, please retry later",
            details,
        )

    if is_timeout_error(exc):
        return ServiceError(
            ErrorCode.TIMEOUT,
            504,
            "LLM provider timed out, please retry later",
            details,
        )

    if status is not None and status >= 500:
        return ServiceError(
            ErrorCode.UPSTREAM_ERROR,
            502,
            "LLM provider is temporarily unavailable",
            details,
        )

    return ServiceError(
        ErrorCode.REQUEST_FAILED,
        status if status is not None and status >= 400 else 500,
        str(exc) or "LLM request failed",
        details,
    )


class LLMJsonClient:
    """Generic call + parse + retry + normalize helper for JSON completions."""

    def __init__(self, config: LLMConfig, completion: CompletionFn | None = None):
        """
        Args:
            config: Explicit, read-only client configuration
            completion: Completion transport; defaults to litellm.acompletion.
                Hosting environments can inject their own (proxies, gateways).
        """
        self._config = config
        self._completion = completion or acompletion

    @property
    def config(self) -> LLMConfig:
        return self._config

    async def complete(self, prompt: str, model: str | None = None) -> Any:
        """
        Request a JSON-mode completion and return the parsed JSON value.

        Only TIMEOUT failures are retried; everything else fails fast.

        Raises:
            ServiceError: RATE_LIMIT, TIMEOUT, UPSTREAM_ERROR, REQUEST_FAILED,
                INVALID_JSON or RETRIES_EXHAUSTED.
        """
        model_name = model or self._config.model
        attempts = self._config.max_retries + 1
        last_timeout: ServiceError | None = None

        for attempt in range(attempts):
            try:
                raw_text = await self._request(prompt, model_name)
            except Exception as e:
                error = classify_error(e)
                if error.code != ErrorCode.TIMEOUT.value:
                    logger.error(f"LLM call to {model_name} failed ({error.code}): {e}")
                    raise error from e

                last_timeout = error
                if attempt < attempts - 1:
                    delay = self._config.retry_backoff_seconds * (2 ** attempt)
                    logger.warning(
                        f"LLM call to {model_name} timed out "
                        f"(attempt {attempt + 1}/{attempts}), retrying in {delay:.2f}s"
                    )
                    await asyncio.sleep(delay)
                continue

            return parse_json_text(raw_text)

        logger.error(f"LLM call to {model_name} timed out on all {attempts} attempts")
        raise ServiceError(
            ErrorCode.RETRIES_EXHAUSTED,
            504,
            f"LLM call failed: retries exhausted after {attempts} attempts",
            details={
                "attempts": attempts,
                "last_error": last_timeout.to_dict() if last_timeout else None,
            },
        )

    async def _request(self, prompt: str, model: str) -> str:
        """Issue one completion call and return the raw text."""
        kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
            "timeout": self._config.request_timeout_seconds,
        }
        if self._config.api_key:
            kwargs["api_key"] = self._config.api_key
        if self._config.api_base:
            kwargs["api_base"] = self._config.api_base

        response = await self._completion(**kwargs)
        content = response.choices[0].message.content
        return (content or "").strip()
