"""Text canonicalization and length-based confidence scoring."""

from __future__ import annotations

import re
from typing import Any

from ..schemas import ExtractionResult

_CONTROL_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_INLINE_SPACE_RE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE_RE = re.compile(r" ?\n ?")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

# (exclusive upper bound on length, score); anything longer scores the ceiling.
_CONFIDENCE_STEPS: tuple[tuple[int, float], ...] = (
    (100, 0.1),
    (500, 0.3),
    (1000, 0.6),
    (2000, 0.8),
)
_CONFIDENCE_CEILING = 0.9


def normalize_text(raw: str | None) -> str:
    """Return canonical text: no control chars, LF line endings, single spaces.

    Line breaks are preserved (at most one blank line in a row) because the
    field heuristics work line by line.
    """
    if not raw:
        return ""
    text = _CONTROL_RE.sub("", raw)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _INLINE_SPACE_RE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE_RE.sub("\n", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    return text.strip()


def score_confidence(text: str) -> float:
    length = len(text)
    for bound, score in _CONFIDENCE_STEPS:
        if length < bound:
            return score
    return _CONFIDENCE_CEILING


def build_result(
    adapter_name: str,
    raw_text: str | None,
    metadata: dict[str, Any] | None = None,
) -> ExtractionResult:
    """Normalize decoder output and wrap it with its confidence score."""
    text = normalize_text(raw_text)
    return ExtractionResult(
        text=text,
        confidence=score_confidence(text),
        metadata=dict(metadata or {}),
        adapter_name=adapter_name,
    )


__all__ = ["normalize_text", "score_confidence", "build_result"]
