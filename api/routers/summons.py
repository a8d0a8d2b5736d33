"""
Summons Assist Router.

Runs the extraction/enrichment pipeline on an uploaded summons.
"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from errors import ErrorCode, ServiceError, invalid_input
from pipeline.factory import PipelineFactory, get_pipeline_factory
from pipeline.results import Failure
from pipeline.run import extract_stage
from schemas import (
    DocumentPayload,
    NormalizedError,
    SummonsAssistInput,
    SummonsAssistRequest,
    SummonsAssistResult,
    SummonsExtractRequest,
    SummonsRecord,
)
from services.pdf_text import pdf_base64_to_text

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/summons", tags=["summons"])

ERROR_RESPONSES = {
    400: {"model": NormalizedError},
    429: {"model": NormalizedError},
    502: {"model": NormalizedError},
    504: {"model": NormalizedError},
}


async def _document_text(payload: DocumentPayload) -> str:
    """Decoded text, converting a base64 PDF off the event loop."""
    if payload.text:
        return payload.text
    return await asyncio.to_thread(pdf_base64_to_text, payload.pdf_base64)


def _request_timeout(factory: PipelineFactory) -> ServiceError:
    seconds = factory.settings.request_timeout_seconds
    logger.error(f"Summons request exceeded {seconds}s and was aborted")
    return ServiceError(
        ErrorCode.TIMEOUT, 504, f"Request timed out after {seconds:g} seconds"
    )


@router.post("/assist", response_model=SummonsAssistResult, responses=ERROR_RESPONSES)
async def assist(
    request: SummonsAssistRequest,
    factory: PipelineFactory = Depends(get_pipeline_factory),
):
    """
    Extract summons fields and optionally add weather, transport and nearby
    places, then compose a narrative summary.
    """
    text = await _document_text(request)
    try:
        assist_input = SummonsAssistInput(
            text=text,
            user_question=request.user_question,
            stay_duration_hours=request.stay_duration_hours,
            include_weather=request.include_weather,
            include_transport=request.include_transport,
            include_poi=request.include_poi,
        )
    except ValidationError as e:
        raise invalid_input(
            "Invalid summons request",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    run = factory.new_run()
    try:
        outcome = await asyncio.wait_for(
            run.execute(assist_input),
            timeout=factory.settings.request_timeout_seconds,
        )
    except asyncio.TimeoutError:
        raise _request_timeout(factory)

    if isinstance(outcome, Failure):
        raise ServiceError.from_normalized(outcome.error)

    logger.info(f"Summons assist completed in state {run.state.value}")
    return outcome.value


@router.post("/extract", response_model=SummonsRecord, responses=ERROR_RESPONSES)
async def extract(
    request: SummonsExtractRequest,
    factory: PipelineFactory = Depends(get_pipeline_factory),
):
    """Extract the six summons fields only."""
    text = await _document_text(request)
    if not text.strip():
        raise invalid_input("document text is empty")

    try:
        outcome = await asyncio.wait_for(
            extract_stage(factory.extractor(), text),
            timeout=factory.settings.request_timeout_seconds,
        )
    except asyncio.TimeoutError:
        raise _request_timeout(factory)

    if isinstance(outcome, Failure):
        raise ServiceError.from_normalized(outcome.error)
    return outcome.value
