import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from config import LLMConfig
from services.llm_json import LLMJsonClient


def completion_response(content):
    """Shape of a litellm completion response."""
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )


def mock_completion(*outcomes):
    """AsyncMock completion yielding each outcome in turn; exceptions are raised."""
    side_effect = [
        outcome if isinstance(outcome, BaseException) else completion_response(outcome)
        for outcome in outcomes
    ]
    return AsyncMock(side_effect=side_effect)


def make_client(completion, max_retries=2):
    config = LLMConfig(
        model="test-model",
        max_retries=max_retries,
        retry_backoff_seconds=0,
    )
    return LLMJsonClient(config, completion)


@pytest.fixture
def summons_text():
    return "案号：（2024）苏01民初1234号，开庭时间：2024年5月1日9:00，法院：南京市鼓楼区人民法院"


@pytest.fixture
def extracted_fields():
    return {
        "caseNumber": "（2024）苏01民初1234号",
        "cause": None,
        "hearingTime": "2024年5月1日9:00",
        "court": "南京市鼓楼区人民法院",
        "courtAddress": None,
        "summonedPerson": None,
    }
