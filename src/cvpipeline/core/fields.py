"""Heuristic candidate field extraction from normalized CV text.

Every field comes from an independent pure function. The heuristics are plain
pattern matches with known failure modes, noted per function. Changing them
shifts the candidate confidence scores callers already rely on.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from ..schemas import CandidateInfo, ExperienceEntry

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
# Digits, spaces, dashes and parentheses on a single line. Dates and reference
# numbers match too.
PHONE_RE = re.compile(r"\+?[\d \t\-()]{10,}")
YEAR_RE = re.compile(r"\d{4}")

DEFAULT_SKILL_PATTERNS: dict[str, str] = {
    "communications": (
        r"communications?|comms?|media|press|pr|public relations|marketing"
        r"|social media|content|writing|editorial"
    ),
    "campaigns": (
        r"campaigns?|advocacy|engagement|grassroots|activism|outreach|community"
        r"|organizing|mobilization"
    ),
    "policy": (
        r"policy|policies|briefing|consultation|legislative|regulatory|government"
        r"|public policy|research|analysis"
    ),
    "publicAffairs": (
        r"public affairs|government affairs|parliamentary|stakeholder relations"
        r"|lobbying|government relations|political|advocacy"
    ),
}

_DASH = r"[–-]"
DEFAULT_EXPERIENCE_PATTERNS: tuple[str, ...] = (
    rf"^(.+?)\s*—\s*(.+?)\s*\((\d{{4}})\s*{_DASH}\s*(\d{{4}}|present)\)",
    rf"^(.+?)\s+at\s+(.+?),\s*(\d{{4}})\s*{_DASH}\s*(\d{{4}}|present)",
)


@dataclass
class FieldExtractorConfig:
    """Tunable parameters for candidate field extraction."""

    skill_patterns: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_SKILL_PATTERNS)
    )
    experience_patterns: Sequence[str] = DEFAULT_EXPERIENCE_PATTERNS
    notes_line_window: int = 5
    notes_min_line_length: int = 20
    notes_max_length: int = 200
    full_length: int = 8000
    low_text_length: int = 300
    low_text_cap: float = 0.3


def non_blank_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n") if line.strip()]


def extract_email(text: str) -> str:
    match = EMAIL_RE.search(text)
    return match.group(0) if match else ""


def extract_phone(text: str) -> str:
    """Return the first loose phone-like run, or ``""``.

    A date range such as ``2019-2021 2022`` or a ten-digit invoice number
    is reported as a phone number.
    """
    match = PHONE_RE.search(text)
    return match.group(0).strip() if match else ""


def extract_name(lines: Sequence[str]) -> tuple[str, str]:
    """Split the first non-blank line into first name and the remainder.

    Assumes the candidate's name heads the document; a letterhead or a
    "Curriculum Vitae" title line is returned as the name.
    """
    if not lines:
        return "", ""
    words = lines[0].split()
    if not words:
        return "", ""
    return words[0], " ".join(words[1:])


def compile_skill_patterns(patterns: Mapping[str, str]) -> dict[str, re.Pattern[str]]:
    return {tag: re.compile(pattern, re.IGNORECASE) for tag, pattern in patterns.items()}


def detect_skills(
    text: str,
    patterns: Mapping[str, re.Pattern[str]] | None = None,
) -> dict[str, bool]:
    """Flag each skill tag whose keyword alternation occurs anywhere in the text.

    No word boundaries: short keywords such as ``pr`` also fire inside longer
    words ("present", "Pritchard").
    """
    compiled = patterns or _DEFAULT_SKILLS
    return {tag: bool(pattern.search(text)) for tag, pattern in compiled.items()}


def extract_experience(
    lines: Iterable[str],
    patterns: Sequence[re.Pattern[str]] | None = None,
) -> list[ExperienceEntry]:
    """Match each line against the role templates; first matching template wins.

    ``present`` is kept as written rather than resolved to a date.
    """
    compiled = patterns or _DEFAULT_EXPERIENCE
    entries: list[ExperienceEntry] = []
    for line in lines:
        for pattern in compiled:
            match = pattern.search(line)
            if not match:
                continue
            title, employer, start, end = match.groups()
            entries.append(
                ExperienceEntry(
                    employer=employer.strip(),
                    title=title.strip(),
                    start_date=start or "",
                    end_date=end or "",
                )
            )
            break
    return entries


def build_notes(
    lines: Sequence[str],
    *,
    window: int = 5,
    min_line_length: int = 20,
    max_length: int = 200,
) -> str:
    """Join prose-looking lines from the head of the document.

    Only the first ``window`` lines are considered; contact lines and dated
    lines are skipped.
    """
    picked = [
        line
        for line in lines[:window]
        if len(line) > min_line_length
        and "@" not in line
        and not YEAR_RE.search(line)
        and "phone" not in line.lower()
        and "email" not in line.lower()
    ]
    joined = " ".join(picked)
    if len(joined) > max_length:
        return joined[:max_length] + "..."
    return joined


def score_candidate(
    *,
    text_length: int,
    first_name: str,
    last_name: str,
    email: str,
    phone: str,
    experience_count: int,
    skill_count: int,
    full_length: int = 8000,
    low_text_length: int = 300,
    low_text_cap: float = 0.3,
) -> float:
    score = min(1.0, text_length / full_length)
    if first_name and last_name:
        score += 0.1
    if email:
        score += 0.1
    if phone:
        score += 0.05
    if experience_count > 0:
        score += 0.1
    score += 0.05 * skill_count
    score = max(0.0, min(score, 1.0))
    if text_length < low_text_length:
        score = min(score, low_text_cap)
    return score


class CandidateFieldExtractor:
    """Derive a :class:`CandidateInfo` from normalized text."""

    def __init__(self, *, config: FieldExtractorConfig | None = None) -> None:
        self._config = config or FieldExtractorConfig()
        self._skills = compile_skill_patterns(self._config.skill_patterns)
        self._experience = [
            re.compile(pattern, re.IGNORECASE) for pattern in self._config.experience_patterns
        ]

    def extract(self, text: str) -> CandidateInfo:
        lines = non_blank_lines(text)
        first_name, last_name = extract_name(lines)
        email = extract_email(text)
        phone = extract_phone(text)
        skills = detect_skills(text, self._skills)
        experience = extract_experience(lines, self._experience)
        notes = build_notes(
            lines,
            window=self._config.notes_line_window,
            min_line_length=self._config.notes_min_line_length,
            max_length=self._config.notes_max_length,
        )
        confidence = score_candidate(
            text_length=len(text),
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            experience_count=len(experience),
            skill_count=sum(1 for flag in skills.values() if flag),
            full_length=self._config.full_length,
            low_text_length=self._config.low_text_length,
            low_text_cap=self._config.low_text_cap,
        )
        return CandidateInfo(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
            skills=skills,
            experience=experience,
            notes=notes,
            confidence=confidence,
        )


_DEFAULT_SKILLS = compile_skill_patterns(DEFAULT_SKILL_PATTERNS)
_DEFAULT_EXPERIENCE = [re.compile(p, re.IGNORECASE) for p in DEFAULT_EXPERIENCE_PATTERNS]


def extract_candidate_info(text: str) -> CandidateInfo:
    return CandidateFieldExtractor().extract(text)


__all__ = [
    "CandidateFieldExtractor",
    "FieldExtractorConfig",
    "build_notes",
    "detect_skills",
    "extract_candidate_info",
    "extract_email",
    "extract_experience",
    "extract_name",
    "extract_phone",
    "score_candidate",
]
