"""Explicit success/failure value for calls whose failure the caller may ignore."""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from homehub.api.errors import HomeHubError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a best-effort call. Exactly one of value/error is set."""

    value: Optional[T] = None
    error: Optional[HomeHubError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: HomeHubError) -> "Result[T]":
        return cls(error=error)
