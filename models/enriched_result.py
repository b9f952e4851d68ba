from dataclasses import dataclass
from enum import Enum
from typing import Any

from models.hits import RepositorySummary

CONTENT_UNAVAILABLE_PLACEHOLDER = "// Content not available"
LIMIT_REACHED_PLACEHOLDER = "// Content not fetched: enrichment limit reached"
FETCH_ERROR_PLACEHOLDER = "// Content could not be fetched: {message}"


class FetchStatus(str, Enum):
    OK = "ok"
    CONTENT_UNAVAILABLE = "content_unavailable"
    LIMIT_REACHED = "limit_reached"
    ERROR = "error"


@dataclass(frozen=True)
class CodeSnippet:
    code: str
    language: str
    line_start: int
    line_end: int
    total_lines: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "language": self.language,
            "line_start": self.line_start,
            "line_end": self.line_end,
            "total_lines": self.total_lines,
        }


@dataclass(frozen=True)
class EnrichedResult:
    id: str
    repository: RepositorySummary
    path: str
    name: str
    url: str
    html_url: str
    snippet: CodeSnippet
    match_score: float
    full_content: str
    fetch_status: FetchStatus
    fetch_error: str | None = None

    def __post_init__(self):
        if self.fetch_status is FetchStatus.ERROR and not self.fetch_error:
            object.__setattr__(self, "fetch_error", "unknown error")

    @property
    def is_fetched(self) -> bool:
        return self.fetch_status is FetchStatus.OK

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "repository": self.repository.to_dict(),
            "path": self.path,
            "name": self.name,
            "url": self.url,
            "html_url": self.html_url,
            "snippet": self.snippet.to_dict(),
            "match_score": self.match_score,
            "full_content": self.full_content,
            "fetch_status": self.fetch_status.value,
            "fetch_error": self.fetch_error,
        }
