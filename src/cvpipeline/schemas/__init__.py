"""Pydantic schema definitions for extraction results and candidate data."""

from __future__ import annotations

from .candidate import SKILL_TAGS, CandidateInfo, ExperienceEntry
from .extraction import AdapterAttemptError, ExtractionResult, ParseOutcome

__all__ = [
    "SKILL_TAGS",
    "CandidateInfo",
    "ExperienceEntry",
    "ExtractionResult",
    "AdapterAttemptError",
    "ParseOutcome",
]
