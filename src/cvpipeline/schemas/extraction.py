"""Extraction result and parse outcome models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .candidate import CandidateInfo


class ExtractionResult(BaseModel):
    """Normalized text produced by one adapter attempt."""

    text: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    metadata: dict[str, Any] = Field(default_factory=dict)
    adapter_name: str
    duration_ms: int = Field(default=0, ge=0)

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class AdapterAttemptError(BaseModel):
    """A failed adapter attempt, kept for diagnostics."""

    adapter_name: str
    message: str

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ParseOutcome(BaseModel):
    """Winning extraction, derived candidate fields and the attempt history."""

    result: ExtractionResult
    candidate: CandidateInfo
    all_results: list[ExtractionResult] = Field(default_factory=list)
    errors: list[AdapterAttemptError] = Field(default_factory=list)
    delegated: bool = False

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        """Flatten into the caller-facing camelCase mapping."""
        payload = self.result.model_dump(mode="json", by_alias=True)
        payload.update(self.candidate.model_dump(mode="json", by_alias=True))
        payload["allResults"] = [
            item.model_dump(mode="json", by_alias=True) for item in self.all_results
        ]
        payload["errors"] = [
            item.model_dump(mode="json", by_alias=True) for item in self.errors
        ]
        return payload
