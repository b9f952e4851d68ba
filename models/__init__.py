"""
Models package: search plans, hits, enriched results and comparison records.
"""

from .comparison_result import AnalysisFields, ComparisonReport, ComparisonResult
from .enriched_result import CodeSnippet, EnrichedResult, FetchStatus
from .errors import (
    CodeSearchError,
    PlanningServiceError,
    PlanParseError,
    QueryValidationError,
    RateLimited,
    UpstreamError,
)
from .hits import ContentHit, RawHit, RepositoryHit, RepositorySummary, SearchResults
from .search_plan import SearchPlan, SearchTarget
from .unified_response import NormalizedError, TokenUsage, UnifiedResponse

__all__ = [
    "AnalysisFields",
    "CodeSearchError",
    "CodeSnippet",
    "ComparisonReport",
    "ComparisonResult",
    "ContentHit",
    "EnrichedResult",
    "FetchStatus",
    "NormalizedError",
    "PlanningServiceError",
    "PlanParseError",
    "QueryValidationError",
    "RateLimited",
    "RawHit",
    "RepositoryHit",
    "RepositorySummary",
    "SearchPlan",
    "SearchResults",
    "SearchTarget",
    "TokenUsage",
    "UnifiedResponse",
    "UpstreamError",
]
