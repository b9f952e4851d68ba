"""
PatternComparator - compares a reference snippet with matching GitHub code.

Searches the code endpoint for the snippet, then for each leading hit fetches
the file and its repository and asks the planning service for a structured
analysis. A candidate that fails at any stage is dropped; the batch itself
always completes.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Any

from api.base_client import BaseAIClient
from api.github_client import GitHubClient
from models.comparison_result import AnalysisFields, ComparisonReport, ComparisonResult
from models.errors import QueryValidationError
from models.hits import ContentHit, RepositorySummary
from models.search_plan import SearchTarget
from orchestrator.plan_sanitizer import parse_json_object
from orchestrator.search_dispatcher import SearchDispatcher
from orchestrator.task_runner import BoundedTaskRunner
from utils.code_utils import decode_content, trim_text
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_COMPARE_LIMIT = 5
DEFAULT_QUERY_CHARS = 200

REPO_FILTER_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")
USER_FILTER_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9-]{0,38})$")
LANGUAGE_PATTERN = re.compile(r"^[A-Za-z0-9+#._-]+$")

ANALYSIS_PROMPT_TEMPLATE = """
As a senior code analyst, analyze these code snippets in detail and provide comprehensive insights:

SOURCE CODE (User's Code):
```
{source}
```

TARGET CODE (GitHub Implementation):
```
{target}
```

Perform a deep professional analysis of the above code samples. Your analysis should be thorough, technically precise, and educational.

IMPORTANT: Return your response as a raw JSON object without ANY markdown formatting, code blocks, or additional text.
Return ONLY the JSON object itself starting with {{ and ending with }}.

Your response must follow this structure:
{{
  "insights": "High-level overview of what this code does, the pattern demonstrated, and how both implementations approach the same problem.",
  "technicalDetails": "Specific technical details about how the target implementation works: algorithms, data structures, language features and techniques.",
  "implementationApproach": "Comparison of the implementation approaches between source and target code, with their tradeoffs.",
  "bestPractices": "Best practices demonstrated in the target code and what the user could learn from it.",
  "similarityScore": 0
}}

similarityScore must be a JSON number: an integer from 0 to 100 rating how closely the target implements the same pattern as the source.
"""


@dataclass(frozen=True)
class PatternFilters:
    """Optional qualifiers narrowing the code search."""

    repo: str | None = None
    user: str | None = None
    stars: int | None = None
    forks: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "PatternFilters":
        data = data or {}
        return cls(
            repo=data.get("repo") or data.get("repoFilter") or data.get("repo_filter"),
            user=data.get("user") or data.get("userFilter") or data.get("user_filter"),
            stars=data.get("stars"),
            forks=data.get("forks"),
        )


def _qualifier_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def build_pattern_query(
    snippet: str,
    language: str | None = None,
    filters: PatternFilters | None = None,
    max_chars: int = DEFAULT_QUERY_CHARS,
) -> str:
    """
    Build a code search query from the head of the snippet plus qualifiers.

    Qualifiers with malformed values are omitted rather than sent.
    """
    filters = filters or PatternFilters()
    parts = [" ".join(snippet[:max_chars].split())]

    if language:
        language = language.strip()
        if LANGUAGE_PATTERN.match(language):
            parts.append(f"language:{language}")
        else:
            logger.warning(f"Ignoring invalid language filter: {language!r}")

    stars = _qualifier_count(filters.stars)
    if stars:
        parts.append(f"stars:>{stars}")
    forks = _qualifier_count(filters.forks)
    if forks:
        parts.append(f"forks:>{forks}")

    if filters.repo:
        repo = filters.repo.strip()
        if REPO_FILTER_PATTERN.match(repo):
            parts.append(f"repo:{repo}")
        else:
            logger.warning(f"Ignoring repo filter not in owner/repo format: {repo!r}")

    if filters.user:
        user = filters.user.strip()
        if USER_FILTER_PATTERN.match(user):
            parts.append(f"user:{user}")
        else:
            logger.warning(f"Ignoring invalid user filter: {user!r}")

    return " ".join(p for p in parts if p)


def build_analysis_prompt(source: str, target: str) -> str:
    return ANALYSIS_PROMPT_TEMPLATE.format(source=source, target=target)


class PatternComparator:
    def __init__(
        self,
        github: GitHubClient,
        llm_client: BaseAIClient,
        dispatcher: SearchDispatcher | None = None,
        runner: BoundedTaskRunner | None = None,
        query_chars: int = DEFAULT_QUERY_CHARS,
        max_target_chars: int = 20000,
        temperature: float = 0.3,
        max_tokens: int = 2048,
    ):
        self.github = github
        self.llm_client = llm_client
        self.dispatcher = dispatcher or SearchDispatcher(github)
        self.runner = runner or BoundedTaskRunner()
        self.query_chars = query_chars
        self.max_target_chars = max_target_chars
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def compare(
        self,
        snippet: str,
        language: str | None = None,
        filters: PatternFilters | dict | None = None,
        limit: int = DEFAULT_COMPARE_LIMIT,
    ) -> list[ComparisonResult]:
        report = await self.run(snippet, language=language, filters=filters, limit=limit)
        return list(report.results)

    async def run(
        self,
        snippet: str,
        language: str | None = None,
        filters: PatternFilters | dict | None = None,
        limit: int = DEFAULT_COMPARE_LIMIT,
    ) -> ComparisonReport:
        """
        Search for the snippet and analyze the leading `limit` matches.

        Raises:
            QueryValidationError: blank snippet
            RateLimited / UpstreamError: the code search itself failed
        """
        if not isinstance(snippet, str) or not snippet.strip():
            raise QueryValidationError("Code pattern is required and must be a non-empty string")
        if limit < 0:
            raise ValueError("limit must be >= 0")
        if not isinstance(filters, PatternFilters):
            filters = PatternFilters.from_dict(filters)

        query_string = build_pattern_query(snippet, language, filters, max_chars=self.query_chars)
        results = await self.dispatcher.search(SearchTarget.CONTENT, query_string)
        candidates = results.content_hits[:limit]

        analyzed = await self.runner.run(
            candidates,
            lambda hit: self._analyze_one(snippet, hit),
            lambda index, hit, error: None,
        )
        valid = tuple(r for r in analyzed if r is not None)

        logger.info(
            f"Pattern comparison complete: {len(valid)}/{len(candidates)} analyzed",
            extra={
                "extra_fields": {
                    "query_string": query_string,
                    "total_count": results.total_count,
                    "dropped": len(candidates) - len(valid),
                }
            },
        )
        return ComparisonReport(
            query_string=query_string, total_count=results.total_count, results=valid
        )

    async def _analyze_one(self, snippet: str, hit: ContentHit) -> ComparisonResult:
        repo_url = hit.repository.api_url
        if repo_url:
            contents, repo_payload = await asyncio.gather(
                self.github.get_json(hit.api_url),
                self.github.get_json(repo_url),
            )
            repository = RepositorySummary.from_api(repo_payload)
        else:
            contents = await self.github.get_json(hit.api_url)
            repository = hit.repository

        code_content = decode_content(contents)
        if code_content is None:
            raise ValueError(f"no inline content for {hit.path}")

        prompt = build_analysis_prompt(snippet, trim_text(code_content, self.max_target_chars))
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None,
            lambda: self.llm_client.get_completion(
                prompt, temperature=self.temperature, max_tokens=self.max_tokens
            ),
        )
        if response.is_error:
            raise RuntimeError(f"analysis failed: {response.error.code}: {response.error.message}")

        analysis = AnalysisFields.from_payload(parse_json_object(response.text))
        if analysis.missing_fields:
            logger.info(
                f"Analysis for {hit.path} missing fields: {', '.join(analysis.missing_fields)}",
                extra={"extra_fields": {"repository": repository.full_name}},
            )

        return ComparisonResult(
            score=hit.score,
            name=hit.name,
            path=hit.path,
            repository=repository,
            code_content=code_content,
            analysis=analysis,
            html_url=hit.html_url,
        )
