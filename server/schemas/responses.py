"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str


class ErrorResponseDTO(BaseModel):
    error: str
    details: dict[str, Any] = Field(default_factory=dict)
    transformed_query: str | None = None


class RepositoryDTO(BaseModel):
    name: str
    full_name: str
    description: str | None = None
    html_url: str
    owner: str
    stars: int
    forks: int
    language: str | None = None


class RepositoryHitDTO(RepositoryDTO):
    score: float


class SnippetDTO(BaseModel):
    code: str
    language: str
    line_start: int
    line_end: int
    total_lines: int


class EnrichedResultDTO(BaseModel):
    id: str
    repository: RepositoryDTO
    path: str
    name: str
    url: str
    html_url: str
    snippet: SnippetDTO
    match_score: float
    full_content: str
    fetch_status: str
    fetch_error: str | None = None


class SearchPlanDTO(BaseModel):
    target: str
    query_string: str
    rationale: str
    assessment: str
    intent: str
    quality: str | None = None


class SearchResponseDTO(BaseModel):
    original_query: str
    transformed_query: str
    plan: SearchPlanDTO
    total_count: int
    incomplete_results: bool
    results: list[EnrichedResultDTO] = Field(default_factory=list)
    repositories: list[RepositoryHitDTO] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome):
        """Convert a SearchOutcome to DTO."""
        return cls(
            original_query=outcome.original_query,
            transformed_query=outcome.plan.query_string,
            plan=SearchPlanDTO.model_validate(outcome.plan.to_dict()),
            total_count=outcome.total_count,
            incomplete_results=outcome.incomplete_results,
            results=[EnrichedResultDTO.model_validate(r.to_dict()) for r in outcome.results],
            repositories=[RepositoryHitDTO.model_validate(r.to_dict()) for r in outcome.repositories],
        )


class AnalysisDTO(BaseModel):
    schema_version: str
    insights: str
    technical_details: str
    implementation_approach: str
    best_practices: str
    similarity_score: int


class ComparisonResultDTO(BaseModel):
    score: float
    name: str
    path: str
    html_url: str
    repository: RepositoryDTO
    code_content: str
    analysis: AnalysisDTO


class PatternAnalyzerResponseDTO(BaseModel):
    transformed_query: str
    total_count: int
    results: list[ComparisonResultDTO] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report):
        """Convert a ComparisonReport to DTO."""
        return cls(
            transformed_query=report.query_string,
            total_count=report.total_count,
            results=[ComparisonResultDTO.model_validate(r.to_dict()) for r in report.results],
        )
