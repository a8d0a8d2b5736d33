"""
Narrative composition.

Turns the structured record and enrichment slots into a fixed-template
Chinese summary. Pure and deterministic.
"""

from schemas import EnrichmentResult, SummonsRecord

NOT_PROVIDED = "未提供"
MAX_POI_ENTRIES = 3

RECORD_LABELS = (
    ("案号", "case_number"),
    ("案由", "cause"),
    ("开庭时间", "hearing_time"),
    ("法院", "court"),
    ("开庭地址", "court_address"),
    ("被传唤人", "summoned_person"),
)


def _bullets(items: list[str]) -> str:
    return "；".join(f"• {item}" for item in items)


def _number(value: float) -> str:
    return f"{value:g}"


def compose_narrative(
    record: SummonsRecord,
    enrichment: EnrichmentResult,
    question: str | None = None,
) -> str:
    """Compose the human-readable summary for one run."""
    lines = ["以下是传票关键信息："]
    for label, field_name in RECORD_LABELS:
        value = getattr(record, field_name)
        lines.append(f"- {label}：{value if value is not None else NOT_PROVIDED}")

    weather = enrichment.weather
    if weather is not None:
        lines.append(
            f"\n天气提示：{weather.location} 当前气温约 {_number(weather.temperature)}°C"
            f"（体感 {_number(weather.feels_like)}°C），湿度 {_number(weather.humidity)}%，"
            f"风速 {_number(weather.wind_speed)}m/s，天气状况为{weather.conditions}。"
        )

    transport = enrichment.transport
    if transport is not None:
        if transport.best_arrival_window:
            lines.append(f"\n抵达时间建议：{transport.best_arrival_window}")
        if transport.public_transit:
            lines.append(f"公共交通：{_bullets(transport.public_transit)}")
        if transport.driving:
            lines.append(f"自驾/停车：{_bullets(transport.driving)}")
        if transport.taxi_or_ride_hailing:
            lines.append(f"打车/网约车：{_bullets(transport.taxi_or_ride_hailing)}")
        if transport.notes:
            lines.append(f"交通注意事项：{_bullets(transport.notes)}")

    poi = enrichment.poi
    if poi is not None and poi.recommendations:
        lines.append("\n附近可短暂停留的地点：")
        for rec in poi.recommendations[:MAX_POI_ENTRIES]:
            lines.append(
                f"- {rec.name}（{rec.type}，{rec.distance}）：亮点 {rec.highlights}；"
                f"小贴士：{rec.tips}"
            )
    if poi is not None and poi.general_advice:
        lines.append(f"补充建议：{_bullets(poi.general_advice)}")

    if question:
        lines.append(f"\n针对你的问题「{question}」，以上信息已全部覆盖。")

    return "\n".join(lines)
