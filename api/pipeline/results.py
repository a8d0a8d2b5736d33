"""
Stage results.

Every stage boundary returns either Success (with data) or Failure (with a
NormalizedError), instead of a loosely-typed status field.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from schemas import NormalizedError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Stage completed with a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Stage failed with a canonical error."""

    error: NormalizedError

    @property
    def ok(self) -> bool:
        return False


StageResult = Union[Success[T], Failure]
