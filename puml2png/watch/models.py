"""Pydantic models and enums for the watch subsystem."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, model_validator


class DecisionReason(str, Enum):
    NO_ARTIFACT_EXISTS = "no_artifact_exists"
    SOURCE_RECENTLY_MODIFIED = "source_recently_modified"
    SYNCHRONIZATION_REQUIRED = "synchronization_required"
    UP_TO_DATE = "up_to_date"


class ConversionOutcome(str, Enum):
    CONVERTED = "converted"
    FAILED = "failed"
    SKIPPED = "skipped"


class RunStatus(str, Enum):
    """Terminal result of a watch loop."""

    STOPPED = "stopped"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self is not RunStatus.FAILED

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


class SourceFile(BaseModel):
    """A diagram source discovered during one directory scan."""

    path: str
    mtime: float


class ConversionDecision(BaseModel):
    """Whether a source needs (re)converting this cycle, and why."""

    should_convert: bool
    reason: DecisionReason

    @model_validator(mode="after")
    def _reason_matches_flag(self) -> ConversionDecision:
        if self.should_convert == (self.reason is DecisionReason.UP_TO_DATE):
            raise ValueError(
                f"reason {self.reason.value!r} inconsistent with should_convert={self.should_convert}"
            )
        return self


class DecisionRecord(BaseModel):
    """One file's decision and what came of it.

    ``decision`` is None when the decision itself could not be made.
    """

    path: str
    outcome: ConversionOutcome
    decision: ConversionDecision | None = None
    error: str | None = None


class PollReport(BaseModel):
    """Outcome of a single directory scan."""

    root: str
    records: list[DecisionRecord] = Field(default_factory=list)
    error: str | None = None
    duration: float = 0.0

    @property
    def converted(self) -> list[str]:
        return [r.path for r in self.records if r.outcome is ConversionOutcome.CONVERTED]

    @property
    def failed(self) -> list[str]:
        return [r.path for r in self.records if r.outcome is ConversionOutcome.FAILED]
