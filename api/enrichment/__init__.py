"""
Enrichment for Summons Assist.

Each category is fetched by its own fetcher:
- weather: Current conditions from a geocoding + forecast HTTP API
- transport: Arrival advice from the language model
- poi: Nearby places from the language model
"""

from enrichment.base import EnrichmentCategory, EnrichmentFetcher
from enrichment.orchestrator import EnrichmentOrchestrator
from enrichment.poi import PoiFetcher
from enrichment.selector import select_categories
from enrichment.transport import TransportFetcher
from enrichment.weather import WeatherFetcher

__all__ = [
    "EnrichmentCategory",
    "EnrichmentFetcher",
    "EnrichmentOrchestrator",
    "PoiFetcher",
    "TransportFetcher",
    "WeatherFetcher",
    "select_categories",
]
