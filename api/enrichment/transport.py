"""
Transport enrichment.

Asks the LLM for arrival timing and route advice to the court.
"""

from enrichment.base import (
    EnrichmentCategory,
    EnrichmentFetcher,
    optional_text,
    require_json_object,
    string_list,
)
from schemas import EnrichmentRequest, TransportAdvice
from services.llm_json import LLMJsonClient


TRANSPORT_PROMPT = """你是一名熟悉中国主要城市交通的法律助理。收到法院或开庭地点后，请给出到场交通建议。

请返回一个 JSON 对象，字段如下：
- bestArrivalWindow: 建议提前多久到达，或在哪个时间段到达最稳妥（字符串）
- publicTransit: 2-3 条公共交通建议（地铁、公交等，字符串数组）
- driving: 2-3 条自驾与停车建议（字符串数组）
- taxiOrRideHailing: 1-2 条打车或网约车建议（字符串数组）
- notes: 2-3 条补充提醒，如证件、时间预留、天气（字符串数组）

输入信息：
- 地点：{location}
- 开庭时间：{hearing_time}

只返回严格的 JSON 对象，不要附加说明。"""


class TransportFetcher(EnrichmentFetcher):
    """Arrival window and route advice."""

    def __init__(self, llm: LLMJsonClient):
        self.llm = llm

    @property
    def category(self) -> EnrichmentCategory:
        return EnrichmentCategory.TRANSPORT

    def build_prompt(self, request: EnrichmentRequest) -> str:
        return TRANSPORT_PROMPT.format(
            location=request.location,
            hearing_time=request.hearing_time or "未提供",
        )

    async def fetch(self, request: EnrichmentRequest) -> TransportAdvice:
        data = require_json_object(
            await self.llm.complete(self.build_prompt(request)), self.category.value
        )

        return TransportAdvice(
            best_arrival_window=optional_text(data.get("bestArrivalWindow")),
            public_transit=string_list(data.get("publicTransit")),
            driving=string_list(data.get("driving")),
            taxi_or_ride_hailing=string_list(data.get("taxiOrRideHailing")),
            notes=string_list(data.get("notes")),
        )
