"""
Weather enrichment via Open-Meteo.

Geocodes the location, then reads the current conditions. No API key is
needed; the HTTP transport can be injected by the hosting environment.
"""

import logging
from typing import Any

import httpx

from config import WeatherConfig
from enrichment.base import EnrichmentCategory, EnrichmentFetcher
from pipeline.location import admin_token
from schemas import EnrichmentRequest, WeatherReport

logger = logging.getLogger(__name__)


# WMO weather interpretation codes
WEATHER_CONDITIONS = {
    0: "晴",
    1: "晴间少云",
    2: "局部多云",
    3: "阴",
    45: "雾",
    48: "冻雾",
    51: "小毛毛雨",
    53: "毛毛雨",
    55: "强毛毛雨",
    56: "小冻毛毛雨",
    57: "冻毛毛雨",
    61: "小雨",
    63: "中雨",
    65: "大雨",
    66: "小冻雨",
    67: "冻雨",
    71: "小雪",
    73: "中雪",
    75: "大雪",
    77: "米雪",
    80: "小阵雨",
    81: "阵雨",
    82: "强阵雨",
    85: "小阵雪",
    86: "阵雪",
    95: "雷阵雨",
    96: "雷阵雨伴小冰雹",
    99: "雷阵雨伴大冰雹",
}

CURRENT_FIELDS = (
    "temperature_2m,apparent_temperature,relative_humidity_2m,"
    "wind_speed_10m,weather_code"
)


def describe_weather_code(code: int | None) -> str:
    return WEATHER_CONDITIONS.get(code, "未知")


class WeatherFetcher(EnrichmentFetcher):
    """Current weather near the court."""

    def __init__(
        self,
        config: WeatherConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self.transport = transport

    @property
    def category(self) -> EnrichmentCategory:
        return EnrichmentCategory.WEATHER

    async def fetch(self, request: EnrichmentRequest) -> WeatherReport:
        async with self._client() as client:
            place = await self._geocode(client, request.location)
            return await self._current_weather(client, place)

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {
            "timeout": self.config.timeout_seconds,
            "follow_redirects": True,
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        elif self.config.proxy:
            kwargs["proxy"] = self.config.proxy
        return httpx.AsyncClient(**kwargs)

    async def _geocode(self, client: httpx.AsyncClient, location: str) -> dict[str, Any]:
        """
        Resolve a place name to coordinates.

        Court names rarely geocode, so the city/district token inside the
        name is tried as a second candidate.

        Raises:
            LookupError: If no candidate resolves.
        """
        candidates = [location]
        token = admin_token(location)
        if token and token != location:
            candidates.append(token)

        for candidate in candidates:
            response = await client.get(
                self.config.geocoding_url,
                params={"name": candidate, "count": 1, "language": "zh", "format": "json"},
            )
            response.raise_for_status()
            results = response.json().get("results") or []
            if results:
                logger.debug(f"Geocoded '{location}' via '{candidate}'")
                return results[0]

        raise LookupError(f"Location '{location}' not found")

    async def _current_weather(
        self, client: httpx.AsyncClient, place: dict[str, Any]
    ) -> WeatherReport:
        response = await client.get(
            self.config.forecast_url,
            params={
                "latitude": place["latitude"],
                "longitude": place["longitude"],
                "current": CURRENT_FIELDS,
                "wind_speed_unit": "ms",
                "timezone": "auto",
            },
        )
        response.raise_for_status()
        current = response.json()["current"]

        return WeatherReport(
            location=place.get("name") or "",
            temperature=current["temperature_2m"],
            feels_like=current["apparent_temperature"],
            humidity=current["relative_humidity_2m"],
            wind_speed=current["wind_speed_10m"],
            conditions=describe_weather_code(current.get("weather_code")),
        )
