"""
Enrichment category selection.

Explicit flags always win; otherwise the free-text question is matched
against a fixed keyword set per category.
"""

from schemas import EnrichmentFlags, EnrichmentSelection

WEATHER_KEYWORDS = ("weather", "天气", "气温", "下雨")
TRANSPORT_KEYWORDS = (
    "交通",
    "到达",
    "路线",
    "怎么去",
    "地铁",
    "公交",
    "停车",
    "route",
    "line",
    "transit",
)
POI_KEYWORDS = ("景点", "周边", "附近", "poi", "吃", "玩", "美食")


def _mentions(question: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in question for keyword in keywords)


def _decide(flag: bool | None, question: str, keywords: tuple[str, ...]) -> bool:
    if flag is not None:
        return flag
    return _mentions(question, keywords)


def select_categories(
    flags: EnrichmentFlags | None, question: str | None
) -> EnrichmentSelection:
    """Decide which of weather / transport / poi to fetch."""
    flags = flags or EnrichmentFlags()
    normalized = (question or "").lower()

    return EnrichmentSelection(
        weather=_decide(flags.weather, normalized, WEATHER_KEYWORDS),
        transport=_decide(flags.transport, normalized, TRANSPORT_KEYWORDS),
        poi=_decide(flags.poi, normalized, POI_KEYWORDS),
    )
