"""Core text-processing components: normalization, selection, field extraction."""

from __future__ import annotations

# NOTE: keep imports explicit for export clarity.
from .fields import CandidateFieldExtractor, FieldExtractorConfig, extract_candidate_info
from .normalizer import build_result, normalize_text, score_confidence
from .selector import compare_results, rank_results, select_best_result

__all__ = [
    "CandidateFieldExtractor",
    "FieldExtractorConfig",
    "extract_candidate_info",
    "build_result",
    "normalize_text",
    "score_confidence",
    "compare_results",
    "rank_results",
    "select_best_result",
]
