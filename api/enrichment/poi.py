"""
Points-of-interest enrichment.

Asks the LLM for places near the court that fit into the waiting time.
"""

from typing import Any

from enrichment.base import (
    EnrichmentCategory,
    EnrichmentFetcher,
    require_json_object,
    string_list,
)
from schemas import EnrichmentRequest, PoiAdvice, PoiRecommendation
from services.llm_json import LLMJsonClient


POI_PROMPT = """你是一名本地向导。请根据法院地点，推荐当事人在等候或办事间隙可以短暂停留的景点、美食或服务设施。

请返回一个 JSON 对象，字段如下：
- recommendations: 数组，最多 3 条，每条包含 name、type（景点/美食/咖啡等）、distance（距离和交通方式）、highlights、tips
- generalAdvice: 2-3 条总体建议（如排队时间、携带物品、注意安全等）

地点：{location}
可利用时间：约 {stay_duration_hours} 小时

只返回严格的 JSON 对象，不要附加说明。"""

RECOMMENDATION_FIELDS = ("name", "type", "distance", "highlights", "tips")


def _recommendation(item: dict[str, Any]) -> PoiRecommendation:
    return PoiRecommendation(
        **{
            key: str(item[key]).strip() if item.get(key) is not None else ""
            for key in RECOMMENDATION_FIELDS
        }
    )


class PoiFetcher(EnrichmentFetcher):
    """Nearby places for a short stay."""

    def __init__(self, llm: LLMJsonClient):
        self.llm = llm

    @property
    def category(self) -> EnrichmentCategory:
        return EnrichmentCategory.POI

    def build_prompt(self, request: EnrichmentRequest) -> str:
        return POI_PROMPT.format(
            location=request.location,
            stay_duration_hours=f"{request.stay_duration_hours:g}",
        )

    async def fetch(self, request: EnrichmentRequest) -> PoiAdvice:
        data = require_json_object(
            await self.llm.complete(self.build_prompt(request)), self.category.value
        )

        items = data.get("recommendations") or []
        if isinstance(items, dict):
            items = [items]
        recommendations = [
            _recommendation(item) for item in items if isinstance(item, dict)
        ]

        return PoiAdvice(
            recommendations=recommendations,
            general_advice=string_list(data.get("generalAdvice")),
        )
