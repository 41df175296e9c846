"""Best-result selection over competing extraction attempts."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Sequence

from ..schemas import ExtractionResult

CONFIDENCE_TOLERANCE = 0.1
LENGTH_TOLERANCE = 100
# Absorbs float error so a difference of exactly 0.1 counts as a tie.
_EPSILON = 1e-9


def compare_results(a: ExtractionResult, b: ExtractionResult) -> float:
    """Order ``a`` before ``b`` (negative) when ``a`` is the better result.

    Sequential tie-breaks rather than a weighted score: confidence first,
    then text length, then the faster attempt. Differences within the
    tolerances count as ties.
    """
    if abs(a.confidence - b.confidence) > CONFIDENCE_TOLERANCE + _EPSILON:
        return b.confidence - a.confidence
    if abs(len(a.text) - len(b.text)) > LENGTH_TOLERANCE:
        return len(b.text) - len(a.text)
    return a.duration_ms - b.duration_ms


def rank_results(results: Sequence[ExtractionResult]) -> list[ExtractionResult]:
    return sorted(results, key=cmp_to_key(compare_results))


def select_best_result(results: Sequence[ExtractionResult]) -> ExtractionResult:
    if not results:
        raise ValueError("Cannot select from an empty result set.")
    return rank_results(results)[0]


__all__ = ["compare_results", "rank_results", "select_best_result"]
