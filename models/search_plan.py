from dataclasses import dataclass
from enum import Enum


class SearchTarget(str, Enum):
    CONTENT = "content"
    REPOSITORY = "repository"
    NONE = "none"

    @classmethod
    def from_wire(cls, value: str) -> "SearchTarget":
        """Map the planning service's endpoint name onto a target."""
        normalized = (value or "").strip().lower()
        aliases = {
            "code": cls.CONTENT,
            "content": cls.CONTENT,
            "repositories": cls.REPOSITORY,
            "repository": cls.REPOSITORY,
            "none": cls.NONE,
        }
        if normalized not in aliases:
            raise ValueError(f"Unknown search target: {value!r}")
        return aliases[normalized]


PLAN_QUALITIES = {"high", "medium", "low"}


@dataclass(frozen=True)
class SearchPlan:
    target: SearchTarget
    query_string: str
    rationale: str
    assessment: str
    intent: str
    quality: str | None = None

    @property
    def is_searchable(self) -> bool:
        return self.target is not SearchTarget.NONE

    def to_dict(self) -> dict:
        return {
            "target": self.target.value,
            "query_string": self.query_string,
            "rationale": self.rationale,
            "assessment": self.assessment,
            "intent": self.intent,
            "quality": self.quality,
        }
