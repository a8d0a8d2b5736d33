"""
Base class for enrichment fetchers.

Each fetcher produces one category of enrichment (weather, transport or
points of interest) for a single EnrichmentRequest.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel

from errors import ErrorCode, ServiceError
from schemas import EnrichmentRequest


class EnrichmentCategory(str, Enum):
    """Enrichment category identifiers, matching EnrichmentResult slots."""

    WEATHER = "weather"
    TRANSPORT = "transport"
    POI = "poi"


class EnrichmentFetcher(ABC):
    """Abstract base class for category fetchers."""

    @property
    @abstractmethod
    def category(self) -> EnrichmentCategory:
        """Return the category this fetcher fills."""
        pass

    @abstractmethod
    async def fetch(self, request: EnrichmentRequest) -> BaseModel:
        """Fetch the category payload; raise on any failure."""
        pass


def require_json_object(data: Any, category: str) -> dict[str, Any]:
    """Reject model output that is not a JSON object."""
    if not isinstance(data, dict):
        raise ServiceError(
            ErrorCode.INVALID_JSON,
            502,
            f"Expected a JSON object for {category} advice, got {type(data).__name__}",
        )
    return data


def string_list(value: Any) -> list[str]:
    """Missing -> [], a lone string -> [string], lists keep their non-empty items."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item).strip() for item in value if item is not None and str(item).strip()]
    return [str(value)]


def optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
