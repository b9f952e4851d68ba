import math
from dataclasses import dataclass, field
from typing import Any

from models.hits import RepositorySummary

ANALYSIS_SCHEMA_VERSION = "1"

SCORE_MIN = 0
SCORE_MAX = 100
SCORE_DEFAULT = 0

# Wire key -> (attribute, placeholder used when the model omits the field)
ANALYSIS_TEXT_FIELDS = {
    "insights": ("insights", "Failed to analyze code patterns"),
    "technicalDetails": (
        "technical_details",
        "Analysis could not be completed due to a technical error.",
    ),
    "implementationApproach": (
        "implementation_approach",
        "Unable to compare implementations at this time.",
    ),
    "bestPractices": ("best_practices", "Analysis was not successful, please try again."),
}


def clamp_score(value: Any) -> int:
    """
    Coerce a model-supplied score into the bounded integer range.

    Missing, non-numeric, boolean and non-finite values map to SCORE_DEFAULT.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return SCORE_DEFAULT
    if isinstance(value, float) and not math.isfinite(value):
        return SCORE_DEFAULT
    return max(SCORE_MIN, min(SCORE_MAX, int(round(value))))


@dataclass(frozen=True)
class AnalysisFields:
    insights: str
    technical_details: str
    implementation_approach: str
    best_practices: str
    similarity_score: int = SCORE_DEFAULT
    schema_version: str = ANALYSIS_SCHEMA_VERSION
    missing_fields: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AnalysisFields":
        values: dict[str, str] = {}
        missing: list[str] = []
        for wire_key, (attr, placeholder) in ANALYSIS_TEXT_FIELDS.items():
            value = payload.get(wire_key)
            if isinstance(value, str) and value.strip():
                values[attr] = value.strip()
            else:
                values[attr] = placeholder
                missing.append(wire_key)

        raw_score = payload.get("similarityScore")
        if clamp_score(raw_score) != raw_score:
            missing.append("similarityScore")

        return cls(
            similarity_score=clamp_score(raw_score),
            missing_fields=tuple(missing),
            **values,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "insights": self.insights,
            "technical_details": self.technical_details,
            "implementation_approach": self.implementation_approach,
            "best_practices": self.best_practices,
            "similarity_score": self.similarity_score,
        }


@dataclass(frozen=True)
class ComparisonResult:
    score: float
    name: str
    path: str
    repository: RepositorySummary
    code_content: str
    analysis: AnalysisFields
    html_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "name": self.name,
            "path": self.path,
            "html_url": self.html_url,
            "repository": self.repository.to_dict(),
            "code_content": self.code_content,
            "analysis": self.analysis.to_dict(),
        }


@dataclass(frozen=True)
class ComparisonReport:
    query_string: str
    total_count: int
    results: tuple[ComparisonResult, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.results)
