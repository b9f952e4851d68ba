"""
ContentEnricher - attaches decoded file content and previews to code search hits.

Only the leading `limit` hits are fetched; the rest are returned as
`limit_reached` placeholders so a batch always keeps its full length and rank
order. Failures are recorded on the individual result, never raised.
"""

import asyncio

from api.github_client import GitHubClient
from models.enriched_result import (
    CONTENT_UNAVAILABLE_PLACEHOLDER,
    FETCH_ERROR_PLACEHOLDER,
    LIMIT_REACHED_PLACEHOLDER,
    CodeSnippet,
    EnrichedResult,
    FetchStatus,
)
from models.hits import ContentHit, RepositorySummary
from orchestrator.task_runner import BoundedTaskRunner
from utils.code_utils import build_preview, count_lines, decode_content, language_from_path
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ENRICH_LIMIT = 10
DEFAULT_PREVIEW_LINES = 10


def _result_id(hit: ContentHit, index: int) -> str:
    return hit.sha or f"result-{index}"


class ContentEnricher:
    def __init__(
        self,
        github: GitHubClient,
        runner: BoundedTaskRunner | None = None,
        languages: dict[str, str] | None = None,
        preview_lines: int = DEFAULT_PREVIEW_LINES,
        fetch_repository_metadata: bool = True,
    ):
        self.github = github
        self.runner = runner or BoundedTaskRunner()
        self.languages = languages or {}
        self.preview_lines = preview_lines
        self.fetch_repository_metadata = fetch_repository_metadata

    async def enrich(
        self, hits: list[ContentHit], limit: int = DEFAULT_ENRICH_LIMIT
    ) -> list[EnrichedResult]:
        """
        Enrich hits in rank order.

        Args:
            hits: Code search hits, best first
            limit: Number of leading hits fetched over the network

        Returns:
            One EnrichedResult per hit: fetched head results, then `limit_reached` tail
        """
        if limit < 0:
            raise ValueError("limit must be >= 0")

        hits = list(hits)
        head = list(enumerate(hits[:limit]))
        tail = list(enumerate(hits[limit:], start=len(head)))

        enriched_head = await self.runner.run(head, self._enrich_one, self._failed_result)
        enriched_tail = [self._limit_reached_result(hit, index) for index, hit in tail]

        counts: dict[str, int] = {}
        for result in enriched_head + enriched_tail:
            counts[result.fetch_status.value] = counts.get(result.fetch_status.value, 0) + 1
        logger.info(
            f"Enriched {len(hits)} hits ({len(head)} fetched)",
            extra={"extra_fields": {"limit": limit, "status_counts": counts}},
        )

        return enriched_head + enriched_tail

    async def _enrich_one(self, indexed_hit: tuple[int, ContentHit]) -> EnrichedResult:
        index, hit = indexed_hit
        repository = hit.repository

        if self.fetch_repository_metadata and repository.api_url:
            contents, repo_payload = await asyncio.gather(
                self.github.get_json(hit.api_url),
                self.github.get_json(repository.api_url),
                return_exceptions=True,
            )
            if isinstance(contents, BaseException):
                raise contents
            if isinstance(repo_payload, BaseException):
                # Repository metadata is optional; the hit already carries a summary
                logger.debug(f"Repository metadata unavailable for {repository.full_name}: {repo_payload}")
            else:
                try:
                    repository = RepositorySummary.from_api(repo_payload)
                except ValueError as e:
                    logger.debug(f"Ignoring malformed repository metadata for {repository.full_name}: {e}")
        else:
            contents = await self.github.get_json(hit.api_url)

        content = decode_content(contents)
        language = language_from_path(hit.path, self.languages)

        if content is None:
            return self._build(
                hit,
                index,
                repository=repository,
                snippet=CodeSnippet(
                    code=hit.text_fragment or CONTENT_UNAVAILABLE_PLACEHOLDER,
                    language=language,
                    line_start=1,
                    line_end=count_lines(hit.text_fragment or ""),
                ),
                full_content=CONTENT_UNAVAILABLE_PLACEHOLDER,
                status=FetchStatus.CONTENT_UNAVAILABLE,
            )

        preview, line_end, total_lines = build_preview(content, self.preview_lines)
        return self._build(
            hit,
            index,
            repository=repository,
            snippet=CodeSnippet(
                code=preview,
                language=language,
                line_start=1,
                line_end=line_end,
                total_lines=total_lines,
            ),
            full_content=content,
            status=FetchStatus.OK,
        )

    def _failed_result(
        self, _task_index: int, indexed_hit: tuple[int, ContentHit], error: BaseException
    ) -> EnrichedResult:
        index, hit = indexed_hit
        message = str(error) or type(error).__name__
        sentinel = FETCH_ERROR_PLACEHOLDER.format(message=message)
        return self._build(
            hit,
            index,
            repository=hit.repository,
            snippet=CodeSnippet(
                code=sentinel,
                language=language_from_path(hit.path, self.languages),
                line_start=1,
                line_end=1,
            ),
            full_content=sentinel,
            status=FetchStatus.ERROR,
            error=message,
        )

    def _limit_reached_result(self, hit: ContentHit, index: int) -> EnrichedResult:
        fragment = hit.text_fragment
        return self._build(
            hit,
            index,
            repository=hit.repository,
            snippet=CodeSnippet(
                code=fragment or LIMIT_REACHED_PLACEHOLDER,
                language=language_from_path(hit.path, self.languages),
                line_start=1,
                line_end=count_lines(fragment) if fragment else 1,
            ),
            full_content=LIMIT_REACHED_PLACEHOLDER,
            status=FetchStatus.LIMIT_REACHED,
        )

    def _build(
        self,
        hit: ContentHit,
        index: int,
        *,
        repository: RepositorySummary,
        snippet: CodeSnippet,
        full_content: str,
        status: FetchStatus,
        error: str | None = None,
    ) -> EnrichedResult:
        return EnrichedResult(
            id=_result_id(hit, index),
            repository=repository,
            path=hit.path,
            name=hit.name,
            url=hit.api_url,
            html_url=hit.html_url,
            snippet=snippet,
            match_score=hit.score,
            full_content=full_content,
            fetch_status=status,
            fetch_error=error,
        )
