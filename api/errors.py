"""
Error taxonomy for the Summons Assist pipeline.

Every failure that crosses a stage boundary is a ServiceError carrying a
NormalizedError, which is also the body returned to HTTP callers.
"""

from enum import Enum
from typing import Any

from schemas import NormalizedError


class ErrorCode(str, Enum):
    """Canonical error codes."""

    INVALID_INPUT = "INVALID_INPUT"
    RATE_LIMIT = "RATE_LIMIT"
    TIMEOUT = "TIMEOUT"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    REQUEST_FAILED = "REQUEST_FAILED"
    INVALID_JSON = "INVALID_JSON"
    RETRIES_EXHAUSTED = "RETRIES_EXHAUSTED"
    EXTRACTION_FAILED = "EXTRACTION_FAILED"
    UNHANDLED = "UNHANDLED"


class ServiceError(Exception):
    """Exception wrapper around a NormalizedError."""

    def __init__(
        self,
        code: ErrorCode,
        status: int,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.error = NormalizedError(
            code=code.value,
            status=status,
            message=message,
            details=details,
        )

    @classmethod
    def from_normalized(cls, error: NormalizedError) -> "ServiceError":
        return cls(ErrorCode(error.code), error.status, error.message, error.details)

    @property
    def code(self) -> str:
        return self.error.code

    @property
    def status(self) -> int:
        return self.error.status

    @property
    def message(self) -> str:
        return self.error.message

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: {code, message, status, details?}."""
        return self.error.model_dump(exclude_none=True)


def invalid_input(message: str, details: dict[str, Any] | None = None) -> ServiceError:
    return ServiceError(ErrorCode.INVALID_INPUT, 400, message, details)
