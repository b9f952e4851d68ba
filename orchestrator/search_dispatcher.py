from api.github_client import GitHubClient
from models.hits import ContentHit, RawHit, RepositoryHit, SearchResults
from models.search_plan import SearchPlan, SearchTarget
from utils.logger import get_logger

logger = get_logger(__name__)


class SearchDispatcher:
    """Runs a planned query against the content or repository search endpoint."""

    def __init__(self, github: GitHubClient, per_page: int | None = None):
        self.github = github
        self.per_page = per_page

    async def dispatch(self, plan: SearchPlan) -> SearchResults:
        """
        Raises:
            ValueError: the plan's target is `none`
            RateLimited: the search quota is exhausted
            UpstreamError: any other failed search request
        """
        return await self.search(plan.target, plan.query_string)

    async def search(self, target: SearchTarget, query_string: str) -> SearchResults:
        if target is SearchTarget.NONE:
            raise ValueError("Plans with target 'none' cannot be dispatched")

        if target is SearchTarget.CONTENT:
            payload = await self.github.search_code(query_string, per_page=self.per_page)
        else:
            payload = await self.github.search_repositories(query_string, per_page=self.per_page)

        hits = self._normalize_items(target, payload.get("items"))
        total_count = payload.get("total_count")
        results = SearchResults(
            target=target,
            query_string=query_string,
            hits=tuple(hits),
            total_count=total_count if isinstance(total_count, int) else len(hits),
            incomplete_results=bool(payload.get("incomplete_results", False)),
        )

        logger.info(
            f"Search returned {len(results)} hits",
            extra={
                "extra_fields": {
                    "target": target.value,
                    "query_string": query_string,
                    "total_count": results.total_count,
                    "incomplete_results": results.incomplete_results,
                }
            },
        )
        return results

    def _normalize_items(self, target: SearchTarget, items) -> list[RawHit]:
        if not isinstance(items, list):
            return []

        factory = ContentHit.from_api if target is SearchTarget.CONTENT else RepositoryHit.from_api
        hits: list[RawHit] = []
        for index, item in enumerate(items):
            try:
                hits.append(factory(item))
            except ValueError as e:
                logger.warning(
                    f"Skipping malformed search item {index}: {e}",
                    extra={"extra_fields": {"target": target.value, "index": index}},
                )
        return hits
