"""Inspectable stage results for the orchestrator state machine.

Each stage boundary (embedding, retrieval, generation, validation) returns a
StageOutcome instead of letting exceptions steer control flow, so the next
transition is decided by looking at `ok`.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class StageOutcome(Generic[T]):
    """Either a value or the error that prevented producing it."""
    stage: str
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, stage: str, value: T) -> "StageOutcome[T]":
        return cls(stage=stage, value=value)

    @classmethod
    def failure(cls, stage: str, error: BaseException) -> "StageOutcome[T]":
        return cls(stage=stage, error=error)

    @property
    def error_type(self) -> Optional[str]:
        return type(self.error).__name__ if self.error is not None else None
