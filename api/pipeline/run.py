"""
Pipeline Run - One summons-assist execution.

extract -> resolve/select -> gather -> compose. Only the extraction stage
can fail the run; once it succeeds the run always reaches DONE.
"""

import logging
from enum import Enum

from enrichment.orchestrator import EnrichmentOrchestrator
from enrichment.selector import select_categories
from errors import ErrorCode, ServiceError
from pipeline.location import resolve_location
from pipeline.narrative import compose_narrative
from pipeline.results import Failure, StageResult, Success
from schemas import (
    EnrichmentResult,
    NormalizedError,
    SummonsAssistInput,
    SummonsAssistResult,
    SummonsRecord,
)
from services.summons_parser import SummonsParserService

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    """Pipeline run states."""

    INIT = "init"
    EXTRACTING = "extracting"
    SELECTING_AND_GATHERING = "selecting_and_gathering"
    COMPOSING = "composing"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.INIT: {RunState.EXTRACTING},
    RunState.EXTRACTING: {RunState.SELECTING_AND_GATHERING, RunState.FAILED},
    RunState.SELECTING_AND_GATHERING: {RunState.COMPOSING},
    RunState.COMPOSING: {RunState.DONE},
    RunState.DONE: set(),
    RunState.FAILED: set(),
}


async def extract_stage(
    extractor: SummonsParserService, text: str
) -> StageResult[SummonsRecord]:
    """
    Run the extraction stage.

    ServiceErrors keep their classification; anything else is wrapped as
    EXTRACTION_FAILED.
    """
    try:
        return Success(await extractor.extract(text))
    except ServiceError as e:
        logger.error(f"Extraction failed ({e.code}): {e.message}")
        return Failure(e.error)
    except Exception as e:
        logger.error(f"Extraction failed unexpectedly: {e}", exc_info=True)
        error = ServiceError(
            ErrorCode.EXTRACTION_FAILED,
            502,
            f"Summons extraction failed: {e}",
            details={"exception": type(e).__name__},
        )
        return Failure(error.error)


class PipelineRun:
    """
    A single, non-reusable summons-assist execution.

    Holds the stage outputs (record, enrichment, narrative) and the terminal
    state or error of the run.
    """

    def __init__(
        self,
        extractor: SummonsParserService,
        orchestrator: EnrichmentOrchestrator,
        default_stay_duration_hours: float = 2.0,
    ):
        self.extractor = extractor
        self.orchestrator = orchestrator
        self.default_stay_duration_hours = default_stay_duration_hours

        self.state = RunState.INIT
        self.record: SummonsRecord | None = None
        self.enrichment: EnrichmentResult | None = None
        self.narrative: str | None = None
        self.error: NormalizedError | None = None

    def _transition(self, target: RunState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal pipeline transition {self.state.value} -> {target.value}"
            )
        logger.debug(f"Pipeline run {self.state.value} -> {target.value}")
        self.state = target

    async def execute(
        self, assist_input: SummonsAssistInput
    ) -> StageResult[SummonsAssistResult]:
        """
        Execute the full pipeline.

        Returns:
            Success with the final payload, or Failure with the extraction
            error.
        """
        if self.state is not RunState.INIT:
            raise RuntimeError("PipelineRun instances are single-use")

        self._transition(RunState.EXTRACTING)
        extracted = await extract_stage(self.extractor, assist_input.text)
        if isinstance(extracted, Failure):
            self.error = extracted.error
            self._transition(RunState.FAILED)
            return extracted

        self.record = extracted.value
        self._transition(RunState.SELECTING_AND_GATHERING)
        self.enrichment = await self._gather(self.record, assist_input)

        self._transition(RunState.COMPOSING)
        self.narrative = compose_narrative(
            self.record, self.enrichment, assist_input.user_question
        )

        self._transition(RunState.DONE)
        return Success(
            SummonsAssistResult(
                structured=self.record,
                user_question=assist_input.user_question,
                weather=self.enrichment.weather,
                transport=self.enrichment.transport,
                poi=self.enrichment.poi,
                narrative=self.narrative,
            )
        )

    async def _gather(
        self, record: SummonsRecord, assist_input: SummonsAssistInput
    ) -> EnrichmentResult:
        """Resolve location, select categories and gather; never fails the run."""
        location = resolve_location(record)
        selection = select_categories(assist_input.flags(), assist_input.user_question)
        stay_duration = (
            assist_input.stay_duration_hours
            if assist_input.stay_duration_hours is not None
            else self.default_stay_duration_hours
        )

        try:
            return await self.orchestrator.gather(
                location, record.hearing_time, stay_duration, selection
            )
        except Exception as e:
            logger.error(f"Enrichment stage failed, continuing without it: {e}")
            return EnrichmentResult.empty()
