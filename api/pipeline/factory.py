"""
Per-request construction of pipeline components.

Settings are read once per process; clients, fetchers and runs are built
fresh for every request and never shared between runs.
"""

import httpx

from config import Settings, get_settings
from enrichment.orchestrator import EnrichmentOrchestrator
from enrichment.poi import PoiFetcher
from enrichment.transport import TransportFetcher
from enrichment.weather import WeatherFetcher
from pipeline.run import PipelineRun
from services.llm_json import CompletionFn, LLMJsonClient
from services.summons_parser import SummonsParserService


class PipelineFactory:
    """Builds fully wired pipeline runs from settings and optional transports."""

    def __init__(
        self,
        settings: Settings,
        completion: CompletionFn | None = None,
        weather_transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self.completion = completion
        self.weather_transport = weather_transport

    def llm_client(self) -> LLMJsonClient:
        return LLMJsonClient(self.settings.llm_config(), self.completion)

    def extractor(self, llm: LLMJsonClient | None = None) -> SummonsParserService:
        return SummonsParserService(llm or self.llm_client())

    def orchestrator(self, llm: LLMJsonClient | None = None) -> EnrichmentOrchestrator:
        llm = llm or self.llm_client()
        return EnrichmentOrchestrator(
            [
                WeatherFetcher(self.settings.weather_config(), self.weather_transport),
                TransportFetcher(llm),
                PoiFetcher(llm),
            ]
        )

    def new_run(self) -> PipelineRun:
        llm = self.llm_client()
        return PipelineRun(
            extractor=self.extractor(llm),
            orchestrator=self.orchestrator(llm),
            default_stay_duration_hours=self.settings.default_stay_duration_hours,
        )


def get_pipeline_factory() -> PipelineFactory:
    """FastAPI dependency; override in tests to inject transports."""
    return PipelineFactory(get_settings())
