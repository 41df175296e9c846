from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SKILL_TAGS: tuple[str, ...] = ("communications", "campaigns", "policy", "publicAffairs")


class ExperienceEntry(BaseModel):
    """Employment history entry as written in the source text."""

    employer: str = ""
    title: str = ""
    start_date: str = ""
    end_date: str = ""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CandidateInfo(BaseModel):
    """Structured candidate fields derived from extracted text."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    skills: dict[str, bool] = Field(
        default_factory=lambda: {tag: False for tag in SKILL_TAGS}
    )
    experience: list[ExperienceEntry] = Field(default_factory=list)
    notes: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def skill_count(self) -> int:
        return sum(1 for flag in self.skills.values() if flag)
