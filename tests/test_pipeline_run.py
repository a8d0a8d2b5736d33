"""Tests for a full pipeline run."""

import httpx
import pytest

from config import Settings
from conftest import completion_response, make_client, mock_completion
from enrichment.orchestrator import EnrichmentOrchestrator
from pipeline.factory import PipelineFactory
from pipeline.results import Failure, Success
from pipeline.run import PipelineRun, RunState, extract_stage
from schemas import SummonsAssistInput
from services.summons_parser import SummonsParserService


class RecordingOrchestrator(EnrichmentOrchestrator):
    def __init__(self):
        super().__init__([])
        self.calls = []

    async def gather(self, location, hearing_time, stay_duration_hours, categories):
        self.calls.append((location, hearing_time, stay_duration_hours, categories))
        return await super().gather(location, hearing_time, stay_duration_hours, categories)


class BrokenOrchestrator(EnrichmentOrchestrator):
    def __init__(self):
        super().__init__([])

    async def gather(self, *args, **kwargs):
        raise RuntimeError("fan-out crashed")


class BrokenExtractor:
    async def extract(self, raw_text):
        raise KeyError("caseNumber")


def no_enrichment(text, **options):
    return SummonsAssistInput(
        text=text,
        include_weather=False,
        include_transport=False,
        include_poi=False,
        **options,
    )


def make_run(completion, orchestrator=None):
    return PipelineRun(
        extractor=SummonsParserService(make_client(completion)),
        orchestrator=orchestrator or RecordingOrchestrator(),
    )


@pytest.mark.asyncio
async def test_end_to_end_without_enrichment(summons_text, extracted_fields):
    orchestrator = RecordingOrchestrator()
    run = make_run(mock_completion(extracted_fields), orchestrator)

    outcome = await run.execute(no_enrichment(summons_text))

    assert isinstance(outcome, Success)
    result = outcome.value
    assert result.structured.case_number == "（2024）苏01民初1234号"
    assert result.structured.hearing_time == "2024年5月1日9:00"
    assert result.structured.court == "南京市鼓楼区人民法院"
    assert result.weather is None and result.transport is None and result.poi is None

    lines = result.narrative.splitlines()
    assert len(lines) == 7
    assert [line.split("：")[0] for line in lines[1:]] == [
        "- 案号",
        "- 案由",
        "- 开庭时间",
        "- 法院",
        "- 开庭地址",
        "- 被传唤人",
    ]

    assert run.state is RunState.DONE
    assert run.record == result.structured
    [(location, hearing_time, stay, selection)] = orchestrator.calls
    assert location == "南京市鼓楼区人民法院"
    assert stay == 2.0
    assert not selection.any()


@pytest.mark.asyncio
async def test_identical_inputs_identical_output(summons_text, extracted_fields):
    first = await make_run(mock_completion(extracted_fields)).execute(
        no_enrichment(summons_text, user_question="需要带什么？")
    )
    second = await make_run(mock_completion(extracted_fields)).execute(
        no_enrichment(summons_text, user_question="需要带什么？")
    )

    assert first.value == second.value
    assert first.value.narrative == second.value.narrative


@pytest.mark.asyncio
async def test_extraction_failure_fails_run(summons_text):
    class Quota(Exception):
        status_code = 429

    orchestrator = RecordingOrchestrator()
    run = make_run(mock_completion(Quota("quota")), orchestrator)

    outcome = await run.execute(no_enrichment(summons_text))

    assert isinstance(outcome, Failure)
    assert outcome.error.code == "RATE_LIMIT"
    assert run.state is RunState.FAILED
    assert run.error == outcome.error
    assert orchestrator.calls == []


@pytest.mark.asyncio
async def test_unexpected_extraction_error():
    outcome = await extract_stage(BrokenExtractor(), "传票")

    assert isinstance(outcome, Failure)
    assert (outcome.error.code, outcome.error.status) == ("EXTRACTION_FAILED", 502)


@pytest.mark.asyncio
async def test_gather_crash_still_completes(summons_text, extracted_fields):
    run = make_run(mock_completion(extracted_fields), BrokenOrchestrator())

    outcome = await run.execute(SummonsAssistInput(text=summons_text, include_weather=True))

    assert isinstance(outcome, Success)
    assert outcome.value.weather is None
    assert run.state is RunState.DONE


@pytest.mark.asyncio
async def test_run_is_single_use(summons_text, extracted_fields):
    run = make_run(mock_completion(extracted_fields, extracted_fields))
    await run.execute(no_enrichment(summons_text))

    with pytest.raises(RuntimeError):
        await run.execute(no_enrichment(summons_text))


def test_illegal_transition():
    run = make_run(mock_completion())

    with pytest.raises(RuntimeError):
        run._transition(RunState.DONE)


@pytest.mark.asyncio
async def test_factory_run_with_enrichment(summons_text, extracted_fields):
    async def completion(**kwargs):
        prompt = kwargs["messages"][0]["content"]
        if "开庭传票" in prompt:
            return completion_response(extracted_fields)
        if "交通建议" in prompt:
            return completion_response({"publicTransit": ["地铁1号线鼓楼站"]})
        raise httpx.ReadTimeout("timed out")

    def weather_handler(request):
        if "search" in request.url.path:
            return httpx.Response(
                200, json={"results": [{"name": "南京", "latitude": 32.06, "longitude": 118.79}]}
            )
        return httpx.Response(
            200,
            json={
                "current": {
                    "temperature_2m": 20,
                    "apparent_temperature": 19,
                    "relative_humidity_2m": 50,
                    "wind_speed_10m": 1.2,
                    "weather_code": 0,
                }
            },
        )

    settings = Settings(llm_max_retries=0, llm_retry_backoff_seconds=0)
    factory = PipelineFactory(
        settings, completion=completion, weather_transport=httpx.MockTransport(weather_handler)
    )

    outcome = await factory.new_run().execute(
        SummonsAssistInput(text=summons_text, user_question="明天天气怎么样？坐地铁怎么去？附近有什么好吃的？")
    )

    result = outcome.value
    assert result.weather.conditions == "晴"
    assert result.transport.public_transit == ["地铁1号线鼓楼站"]
    assert result.poi is None
    assert "天气提示：南京" in result.narrative
    assert "公共交通：• 地铁1号线鼓楼站" in result.narrative
    assert result.narrative.endswith("以上信息已全部覆盖。")
