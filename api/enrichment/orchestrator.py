"""
Enrichment Orchestrator - Fans out category fetchers concurrently.

Runs one task per selected category and waits for all of them. A failing
category only empties its own slot; it never affects its siblings or the
caller.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from enrichment.base import EnrichmentCategory, EnrichmentFetcher
from errors import invalid_input
from schemas import EnrichmentRequest, EnrichmentResult, EnrichmentSelection

logger = logging.getLogger(__name__)

DEFAULT_STAY_DURATION_HOURS = 2.0


class EnrichmentOrchestrator:
    """
    Orchestrates enrichment lookups for a single run.

    Responsibilities:
    - Skip all outbound calls when nothing is selected or there is no location
    - Launch one isolated task per selected category
    - Absorb per-category failures into null slots
    """

    def __init__(self, fetchers: list[EnrichmentFetcher]):
        self.fetchers: dict[EnrichmentCategory, EnrichmentFetcher] = {
            fetcher.category: fetcher for fetcher in fetchers
        }

    async def gather(
        self,
        location: str,
        hearing_time: str | None,
        stay_duration_hours: float | None,
        categories: EnrichmentSelection | Mapping[str, Any],
    ) -> EnrichmentResult:
        """
        Fetch the selected categories for a location.

        Args:
            location: Lookup location; empty means "skip enrichment"
            hearing_time: Optional hearing time hint
            stay_duration_hours: Stay hint in [0.5, 6], defaults to 2
            categories: Which categories to fetch

        Returns:
            EnrichmentResult with a null slot for every category that was not
            selected or whose fetch failed

        Raises:
            ServiceError: INVALID_INPUT for malformed arguments only.
        """
        selection = self._coerce_selection(categories)
        request = self._build_request(location, hearing_time, stay_duration_hours)

        if not selection.any() or not request.location:
            logger.info(
                "Skipping enrichment: "
                + ("no category selected" if not selection.any() else "no usable location")
            )
            return EnrichmentResult.empty()

        selected = [
            category
            for category in EnrichmentCategory
            if getattr(selection, category.value)
        ]
        logger.info(
            f"Gathering enrichment for '{request.location}': "
            f"{[category.value for category in selected]}"
        )

        results = await asyncio.gather(
            *(self._fetch_isolated(category, request) for category in selected)
        )

        return EnrichmentResult(
            **{category.value: result for category, result in zip(selected, results)}
        )

    async def _fetch_isolated(
        self, category: EnrichmentCategory, request: EnrichmentRequest
    ) -> BaseModel | None:
        """Run one fetcher; any failure becomes None."""
        fetcher = self.fetchers.get(category)
        if fetcher is None:
            logger.warning(f"No fetcher registered for {category.value}")
            return None

        try:
            return await fetcher.fetch(request)
        except Exception as e:
            logger.warning(
                f"{category.value} enrichment failed for '{request.location}': "
                f"{type(e).__name__}: {e}"
            )
            return None

    def _coerce_selection(
        self, categories: EnrichmentSelection | Mapping[str, Any]
    ) -> EnrichmentSelection:
        if isinstance(categories, EnrichmentSelection):
            return categories

        if not isinstance(categories, Mapping):
            raise invalid_input(
                f"categories must be a mapping, got {type(categories).__name__}"
            )

        expected = {category.value for category in EnrichmentCategory}
        missing = expected - set(categories)
        if missing:
            raise invalid_input(
                "categories is missing keys", details={"missing": sorted(missing)}
            )

        try:
            return EnrichmentSelection.model_validate(dict(categories), strict=True)
        except ValidationError as e:
            raise invalid_input(
                "categories must map each category to a boolean",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def _build_request(
        self,
        location: str,
        hearing_time: str | None,
        stay_duration_hours: float | None,
    ) -> EnrichmentRequest:
        if not isinstance(location, str):
            raise invalid_input(f"location must be a string, got {type(location).__name__}")

        try:
            return EnrichmentRequest(
                location=location.strip(),
                hearing_time=hearing_time,
                stay_duration_hours=(
                    DEFAULT_STAY_DURATION_HOURS
                    if stay_duration_hours is None
                    else stay_duration_hours
                ),
            )
        except ValidationError as e:
            raise invalid_input(
                "Invalid enrichment request",
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e
