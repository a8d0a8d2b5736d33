"""
Pydantic schemas for the Summons Assist pipeline and its API.

Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


MIN_STAY_HOURS = 0.5
MAX_STAY_HOURS = 6.0


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FrozenCamelModel(CamelModel):
    """Immutable stage output handed forward to the next stage."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


# =============================================================================
# Errors
# =============================================================================


class NormalizedError(BaseModel):
    """Canonical failure shape for every stage boundary and API response."""

    code: str
    status: int = Field(ge=400)
    message: str
    details: dict[str, Any] | None = None


# =============================================================================
# Extraction
# =============================================================================


class SummonsRecord(FrozenCamelModel):
    """Six structured fields extracted from a court summons."""

    case_number: str | None = None
    cause: str | None = None
    hearing_time: str | None = None
    court: str | None = None
    court_address: str | None = None
    summoned_person: str | None = None
    raw_text: str


# =============================================================================
# Enrichment
# =============================================================================


class EnrichmentFlags(CamelModel):
    """Explicit per-category overrides; None means "decide from the question"."""

    weather: bool | None = None
    transport: bool | None = None
    poi: bool | None = None


class EnrichmentSelection(FrozenCamelModel):
    """Categories chosen for one enrichment pass."""

    weather: bool = False
    transport: bool = False
    poi: bool = False

    def any(self) -> bool:
        return self.weather or self.transport or self.poi


class EnrichmentRequest(FrozenCamelModel):
    """Input shared by every category fetcher."""

    location: str = ""
    hearing_time: str | None = None
    stay_duration_hours: float = Field(
        default=2.0, ge=MIN_STAY_HOURS, le=MAX_STAY_HOURS
    )


class WeatherReport(FrozenCamelModel):
    """Current conditions near the court."""

    location: str
    temperature: float
    feels_like: float
    humidity: float
    wind_speed: float
    conditions: str


class TransportAdvice(FrozenCamelModel):
    """Arrival and route advice."""

    best_arrival_window: str | None = None
    public_transit: list[str] = Field(default_factory=list)
    driving: list[str] = Field(default_factory=list)
    taxi_or_ride_hailing: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


class PoiRecommendation(FrozenCamelModel):
    """A single nearby place worth a short stay."""

    name: str = ""
    type: str = ""
    distance: str = ""
    highlights: str = ""
    tips: str = ""


class PoiAdvice(FrozenCamelModel):
    """Nearby places plus general advice."""

    recommendations: list[PoiRecommendation] = Field(default_factory=list)
    general_advice: list[str] = Field(default_factory=list)


class EnrichmentResult(FrozenCamelModel):
    """Three independent, fail-soft enrichment slots."""

    weather: WeatherReport | None = None
    transport: TransportAdvice | None = None
    poi: PoiAdvice | None = None

    @classmethod
    def empty(cls) -> "EnrichmentResult":
        return cls()


# =============================================================================
# Pipeline input / output
# =============================================================================


class AssistOptions(CamelModel):
    """Question, stay duration and category overrides shared by the inputs."""

    user_question: str | None = None
    stay_duration_hours: float | None = Field(
        default=None, ge=MIN_STAY_HOURS, le=MAX_STAY_HOURS
    )
    include_weather: bool | None = None
    include_transport: bool | None = None
    include_poi: bool | None = None

    def flags(self) -> EnrichmentFlags:
        return EnrichmentFlags(
            weather=self.include_weather,
            transport=self.include_transport,
            poi=self.include_poi,
        )


class SummonsAssistInput(AssistOptions):
    """Decoded summons text plus assist options; one per pipeline run."""

    text: str

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("document text is empty")
        return value


class DocumentPayload(CamelModel):
    """A summons given either as decoded text or as a base64 PDF."""

    text: str | None = None
    pdf_base64: str | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "DocumentPayload":
        if bool(self.text) == bool(self.pdf_base64):
            raise ValueError("provide exactly one of 'text' or 'pdfBase64'")
        return self


class SummonsAssistRequest(DocumentPayload, AssistOptions):
    """Request body for the assist endpoint."""


class SummonsExtractRequest(DocumentPayload):
    """Request body for the extraction-only endpoint."""


class SummonsAssistResult(FrozenCamelModel):
    """Final payload of a successful run."""

    structured: SummonsRecord
    user_question: str | None = None
    weather: WeatherReport | None = None
    transport: TransportAdvice | None = None
    poi: PoiAdvice | None = None
    narrative: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
