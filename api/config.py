"""
Configuration settings for the Summons Assist API.

Uses pydantic-settings for environment variable management.
"""

from dataclasses import dataclass
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


@dataclass(frozen=True)
class LLMConfig:
    """Explicit, read-only configuration handed to each LLM JSON client."""

    model: str
    api_key: str | None = None
    api_base: str | None = None
    request_timeout_seconds: float = 25.0
    max_retries: int = 2
    retry_backoff_seconds: float = 0.5

    @property
    def retry_budget_seconds(self) -> float:
        """Longest one complete() call can take before RETRIES_EXHAUSTED."""
        backoff = sum(
            self.retry_backoff_seconds * (2 ** attempt)
            for attempt in range(self.max_retries)
        )
        return (self.max_retries + 1) * self.request_timeout_seconds + backoff


@dataclass(frozen=True)
class WeatherConfig:
    """Configuration for the Open-Meteo weather lookup."""

    geocoding_url: str
    forecast_url: str
    timeout_seconds: float = 10.0
    proxy: str | None = None


class Settings(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Summons Assist API"
    api_version: str = "1.0.0"
    api_prefix: str = "/api/v1"
    debug: bool = False
    log_level: str = "INFO"

    # Only for trusted environments: adds tracebacks to error payloads
    expose_diagnostics: bool = False

    # Overall budget for one pipeline run; keep above the LLM retry budget
    # (llm_max_retries + 1) * llm_request_timeout_seconds + backoff
    request_timeout_seconds: float = 90.0

    # CORS Settings
    cors_origins: list[str] = ["*"]

    # LLM Settings (any litellm model string, e.g. "vertex_ai/gemini-2.5-flash")
    llm_model: str = "gpt-4o-mini"
    llm_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("llm_api_key", "openai_api_key"),
    )
    llm_api_base: str | None = None
    llm_request_timeout_seconds: float = 25.0
    llm_max_retries: int = 2
    llm_retry_backoff_seconds: float = 0.5

    # Weather Settings (Open-Meteo, no key required)
    weather_geocoding_url: str = "https://geocoding-api.open-meteo.com/v1/search"
    weather_forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timeout_seconds: float = 10.0
    outbound_proxy: str | None = None

    # Enrichment Settings
    default_stay_duration_hours: float = 2.0

    class Config:
        env_file = ".env"
        extra = "ignore"

    def llm_config(self) -> LLMConfig:
        """Build the client configuration from the current settings."""
        return LLMConfig(
            model=self.llm_model,
            api_key=self.llm_api_key,
            api_base=self.llm_api_base,
            request_timeout_seconds=self.llm_request_timeout_seconds,
            max_retries=self.llm_max_retries,
            retry_backoff_seconds=self.llm_retry_backoff_seconds,
        )

    def weather_config(self) -> WeatherConfig:
        return WeatherConfig(
            geocoding_url=self.weather_geocoding_url,
            forecast_url=self.weather_forecast_url,
            timeout_seconds=self.weather_timeout_seconds,
            proxy=self.outbound_proxy,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
