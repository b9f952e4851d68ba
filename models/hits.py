"""
Typed views of GitHub search results.

Raw search payloads are loosely structured JSON; they are narrowed into these
records at the API boundary (`from_api`) and never passed further untyped.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from models.search_plan import SearchTarget


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"missing or invalid '{key}'")
    return value


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _count(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return int(value)


def _score(data: dict[str, Any]) -> float:
    value = data.get("score")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _owner_login(data: dict[str, Any]) -> str:
    owner = data.get("owner")
    if isinstance(owner, dict) and isinstance(owner.get("login"), str):
        return owner["login"]
    return "unknown"


@dataclass(frozen=True)
class RepositorySummary:
    name: str
    full_name: str
    description: str | None = None
    html_url: str = ""
    owner: str = "unknown"
    stars: int = 0
    forks: int = 0
    language: str | None = None
    api_url: str = ""

    @classmethod
    def from_api(cls, data: Any) -> "RepositorySummary":
        if not isinstance(data, dict):
            raise ValueError("repository payload is not an object")
        return cls(
            name=_require_str(data, "name"),
            full_name=_require_str(data, "full_name"),
            description=_optional_str(data, "description"),
            html_url=_optional_str(data, "html_url") or "",
            owner=_owner_login(data),
            stars=_count(data, "stargazers_count"),
            forks=_count(data, "forks_count"),
            language=_optional_str(data, "language"),
            api_url=_optional_str(data, "url") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "full_name": self.full_name,
            "description": self.description,
            "html_url": self.html_url,
            "owner": self.owner,
            "stars": self.stars,
            "forks": self.forks,
            "language": self.language,
        }


@dataclass(frozen=True)
class ContentHit:
    """One `/search/code` item."""

    path: str
    name: str
    api_url: str
    html_url: str
    score: float
    repository: RepositorySummary
    sha: str | None = None
    text_fragment: str | None = None

    @classmethod
    def from_api(cls, item: Any) -> "ContentHit":
        if not isinstance(item, dict):
            raise ValueError("code search item is not an object")

        fragment = None
        text_matches = item.get("text_matches")
        if isinstance(text_matches, list) and text_matches:
            first = text_matches[0]
            if isinstance(first, dict) and isinstance(first.get("fragment"), str):
                fragment = first["fragment"]

        return cls(
            path=_require_str(item, "path"),
            name=_require_str(item, "name"),
            api_url=_require_str(item, "url"),
            html_url=_optional_str(item, "html_url") or "",
            score=_score(item),
            repository=RepositorySummary.from_api(item.get("repository")),
            sha=_optional_str(item, "sha"),
            text_fragment=fragment,
        )


@dataclass(frozen=True)
class RepositoryHit:
    """One `/search/repositories` item."""

    name: str
    full_name: str
    description: str | None
    html_url: str
    score: float
    owner: str
    stars: int
    forks: int
    language: str | None

    @classmethod
    def from_api(cls, item: Any) -> "RepositoryHit":
        if not isinstance(item, dict):
            raise ValueError("repository search item is not an object")
        return cls(
            name=_require_str(item, "name"),
            full_name=_require_str(item, "full_name"),
            description=_optional_str(item, "description"),
            html_url=_require_str(item, "html_url"),
            score=_score(item),
            owner=_owner_login(item),
            stars=_count(item, "stargazers_count"),
            forks=_count(item, "forks_count"),
            language=_optional_str(item, "language"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "full_name": self.full_name,
            "description": self.description,
            "html_url": self.html_url,
            "score": self.score,
            "owner": self.owner,
            "stars": self.stars,
            "forks": self.forks,
            "language": self.language,
        }


RawHit = Union[ContentHit, RepositoryHit]


@dataclass(frozen=True)
class SearchResults:
    target: SearchTarget
    query_string: str
    hits: tuple[RawHit, ...] = field(default_factory=tuple)
    total_count: int = 0
    incomplete_results: bool = False

    @property
    def content_hits(self) -> list[ContentHit]:
        return [h for h in self.hits if isinstance(h, ContentHit)]

    def __len__(self) -> int:
        return len(self.hits)
