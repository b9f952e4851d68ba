"""
CodeSearchOrchestrator - the pipeline's public entry points.

Wires the query planner, plan sanitizer, search dispatcher, content enricher and
pattern comparator around one planning-service client and one GitHub client.
Both clients are created once per process and passed in explicitly.
"""

import asyncio
import concurrent.futures
import uuid
from dataclasses import dataclass, field
from typing import Any

from api.base_client import BaseAIClient
from api.factory import create_github_client, create_llm_client
from api.github_client import GitHubClient
from config.config import Config
from config.pipeline import PipelineSettings
from models.comparison_result import ComparisonReport, ComparisonResult
from models.enriched_result import EnrichedResult
from models.hits import ContentHit, RepositoryHit, SearchResults
from models.search_plan import SearchPlan, SearchTarget
from orchestrator.content_enricher import ContentEnricher
from orchestrator.pattern_comparator import PatternComparator, PatternFilters
from orchestrator.plan_sanitizer import PlanSanitizer
from orchestrator.query_planner import QueryPlanner, validate_query
from orchestrator.search_dispatcher import SearchDispatcher
from orchestrator.task_runner import BoundedTaskRunner
from utils.logger import get_logger, log_context

logger = get_logger(__name__)


def new_search_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class SearchOutcome:
    """Result of the full natural-language search flow."""

    original_query: str
    plan: SearchPlan
    results: tuple[EnrichedResult, ...] = field(default_factory=tuple)
    repositories: tuple[RepositoryHit, ...] = field(default_factory=tuple)
    total_count: int = 0
    incomplete_results: bool = False

    @property
    def target(self) -> SearchTarget:
        return self.plan.target


class CodeSearchOrchestrator:
    """
    Example usage:
        async with GitHubClient(token=...) as github:
            orchestrator = CodeSearchOrchestrator(llm_client, github)
            outcome = await orchestrator.search("react hooks for form validation")
    """

    def __init__(
        self,
        llm_client: BaseAIClient,
        github: GitHubClient,
        settings: PipelineSettings | None = None,
    ):
        self.settings = settings or PipelineSettings.from_yaml()
        self.llm_client = llm_client
        self.github = github
        # Sync wrappers reuse one loop so pooled GitHub connections stay valid
        self._sync_loop: asyncio.AbstractEventLoop | None = None

        runner = BoundedTaskRunner(
            max_concurrency=self.settings.max_concurrency,
            timeout_s=self.settings.task_timeout_s,
        )
        self.planner = QueryPlanner(
            llm_client,
            timeout_s=self.settings.planning_timeout_s,
            temperature=self.settings.planning_temperature,
            max_tokens=self.settings.planning_max_output_tokens,
        )
        self.sanitizer = PlanSanitizer()
        self.dispatcher = SearchDispatcher(github, per_page=self.settings.search_per_page)
        self.enricher = ContentEnricher(
            github,
            runner=runner,
            languages=self.settings.languages,
            preview_lines=self.settings.preview_lines,
            fetch_repository_metadata=self.settings.fetch_repository_metadata,
        )
        self.comparator = PatternComparator(
            github,
            llm_client,
            dispatcher=self.dispatcher,
            runner=runner,
            query_chars=self.settings.pattern_query_chars,
            max_target_chars=self.settings.analysis_max_target_chars,
            temperature=self.settings.analysis_temperature,
            max_tokens=self.settings.analysis_max_output_tokens,
        )

    @classmethod
    def from_config(
        cls, config: Config | None = None, settings: PipelineSettings | None = None
    ) -> "CodeSearchOrchestrator":
        """Build the orchestrator and both clients from environment configuration."""
        config = config or Config()
        settings = settings or PipelineSettings.from_yaml(config.PIPELINE_CONFIG_PATH)
        return cls(
            create_llm_client(config),
            create_github_client(config, settings),
            settings,
        )

    async def aclose(self) -> None:
        await self.github.aclose()

    # --- Entry points ---

    async def plan_search(self, query: str) -> SearchPlan:
        """
        Raises:
            QueryValidationError, PlanningServiceError, PlanParseError
        """
        raw_text = await self.planner.plan_raw(query)
        plan = self.sanitizer.parse(raw_text)
        logger.info(
            "Query planned",
            extra={
                "extra_fields": {
                    "target": plan.target.value,
                    "query_string": plan.query_string,
                    "quality": plan.quality,
                }
            },
        )
        return plan

    async def dispatch_search(self, plan: SearchPlan) -> SearchResults:
        """
        Raises:
            RateLimited, UpstreamError
        """
        return await self.dispatcher.dispatch(plan)

    async def enrich_content(
        self, hits: list[ContentHit], limit: int | None = None
    ) -> list[EnrichedResult]:
        return await self.enricher.enrich(
            hits, self.settings.enrich_limit if limit is None else limit
        )

    async def compare_patterns(
        self,
        snippet: str,
        language: str | None = None,
        filters: PatternFilters | dict | None = None,
        limit: int | None = None,
    ) -> list[ComparisonResult]:
        report = await self.analyze_pattern(snippet, language, filters, limit)
        return list(report.results)

    async def analyze_pattern(
        self,
        snippet: str,
        language: str | None = None,
        filters: PatternFilters | dict | None = None,
        limit: int | None = None,
    ) -> ComparisonReport:
        with log_context(search_id=new_search_id(), operation="analyze_pattern"):
            return await self.comparator.run(
                snippet,
                language=language,
                filters=filters,
                limit=self.settings.compare_limit if limit is None else limit,
            )

    async def search(self, query: str, limit: int | None = None) -> SearchOutcome:
        """
        Run the whole search flow: plan, dispatch, and enrich code hits.

        A `none` plan returns an empty outcome without calling GitHub. Every log
        record emitted along the way carries the same `search_id`.
        """
        with log_context(search_id=new_search_id(), operation="search"):
            return await self._search(query, limit)

    async def _search(self, query: str, limit: int | None) -> SearchOutcome:
        query = validate_query(query)
        plan = await self.plan_search(query)

        if not plan.is_searchable:
            logger.info("Plan target is 'none'; skipping search")
            return SearchOutcome(original_query=query, plan=plan)

        results = await self.dispatch_search(plan)

        if plan.target is SearchTarget.REPOSITORY:
            return SearchOutcome(
                original_query=query,
                plan=plan,
                repositories=tuple(h for h in results.hits if isinstance(h, RepositoryHit)),
                total_count=results.total_count,
                incomplete_results=results.incomplete_results,
            )

        enriched = await self.enrich_content(results.content_hits, limit)
        return SearchOutcome(
            original_query=query,
            plan=plan,
            results=tuple(enriched),
            total_count=results.total_count,
            incomplete_results=results.incomplete_results,
        )

    # --- Sync wrappers (CLI) ---

    def search_sync(self, query: str, limit: int | None = None) -> SearchOutcome:
        return self._run_sync(self.search(query, limit))

    def analyze_pattern_sync(
        self,
        snippet: str,
        language: str | None = None,
        filters: PatternFilters | dict | None = None,
        limit: int | None = None,
    ) -> ComparisonReport:
        return self._run_sync(self.analyze_pattern(snippet, language, filters, limit))

    def close_sync(self) -> None:
        """Close the GitHub client on the loop the sync wrappers used."""
        try:
            self._run_sync(self.aclose())
        finally:
            if self._sync_loop is not None:
                self._sync_loop.close()
                self._sync_loop = None

    def _run_sync(self, coro) -> Any:
        """
        Run a coroutine to completion from synchronous code.

        Calls made without a running loop share one private loop. When an event
        loop is already running, the coroutine runs in a separate thread with its
        own loop.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            if self._sync_loop is None:
                self._sync_loop = asyncio.new_event_loop()
            return self._sync_loop.run_until_complete(coro)

        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
            return executor.submit(asyncio.run, coro).result()
