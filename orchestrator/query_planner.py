import asyncio

from api.base_client import BaseAIClient
from models.errors import PlanningServiceError, QueryValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

PLANNING_PROMPT_TEMPLATE = """
You are a specialized assistant that converts natural language queries about GitHub repositories and code into GitHub API search queries. GitHub offers two search endpoints:
1. `/search/repositories` - for finding repositories.
2. `/search/code` - for finding code within repositories.

Your task is to:

1. **Determine the query type:** Identify whether the user's query is focused on repositories or code. If the user's query appears to be a single word (which may be a GitHub username), assume the intention is to search for repositories owned by that user using the qualifier `user:<username>`.

2. **Construct the query:** Translate the natural language query into a GitHub API search query string with appropriate parameters and qualifiers. Follow these formatting rules:
   - Always use "qualifier:value" format (e.g., `language:javascript`, `user:username`)
   - Separate qualifiers with spaces, NOT plus signs
   - Common qualifiers: `language:`, `user:`, `repo:`, `stars:>1000`, `created:>2022-01-01`, `extension:`, `path:`, `size:<1000`
   - Place search terms BEFORE any qualifiers (e.g., "react component language:javascript")
   - If using a language qualifier, do NOT include the language name in the search terms
   - Do not include the prefix `q=` in the constructed query

3. **Handle unsupported queries:** If the query cannot be served by these two endpoints, use the endpoint "none" and explain why in "feedback".

**Return Format:**
Return only a valid JSON object with exactly this structure, without markdown formatting or additional keys:

{{
  "decision_details": {{
    "endpoint": "repositories | code | none",
    "constructed_url": "the constructed search query string (without q= prefix)",
    "feedback": "brief explanation of how well the query matches GitHub search capabilities",
    "reasoning": "detailed explanation of the parameter choices and any assumptions made",
    "intention": "interpreted user intention"
  }},
  "evaluation": {{
    "quality": "high | medium | low"
  }}
}}

Natural language query: {query}

IMPORTANT: For a query like "Find Python code for house robber problem", the constructed_url should be "house robber problem language:python" NOT "python house robber language:python".
"""


def validate_query(query: str) -> str:
    """Return the trimmed query or raise QueryValidationError for blank input."""
    if not isinstance(query, str) or not query.strip():
        raise QueryValidationError("Query is required and must be a non-empty string")
    return query.strip()


def build_planning_prompt(query: str) -> str:
    return PLANNING_PROMPT_TEMPLATE.format(query=query)


class QueryPlanner:
    """Asks the planning service to translate a natural-language query into a search plan."""

    def __init__(
        self,
        client: BaseAIClient,
        timeout_s: float = 30.0,
        temperature: float = 0.2,
        max_tokens: int = 1024,
    ):
        self.client = client
        self.timeout_s = timeout_s
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def plan_raw(self, query: str) -> str:
        """
        Call the planning service once and return its raw text.

        Raises:
            QueryValidationError: blank query (the service is not called)
            PlanningServiceError: the call failed, timed out or returned nothing
        """
        query = validate_query(query)
        prompt = build_planning_prompt(query)
        provider = getattr(self.client, "provider_name", "unknown")

        loop = asyncio.get_running_loop()
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(
                    None,
                    lambda: self.client.get_completion(
                        prompt, temperature=self.temperature, max_tokens=self.max_tokens
                    ),
                ),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Planning service timed out after {self.timeout_s}s",
                extra={"extra_fields": {"provider": provider}},
            )
            raise PlanningServiceError(
                f"Planning service timed out after {self.timeout_s}s",
                code="timeout",
                provider=provider,
            ) from e

        if response.is_error:
            error = response.error
            raise PlanningServiceError(
                f"Planning service error: {error.message}",
                code=error.code,
                status_code=error.status_code,
                provider=error.provider,
            )

        if not (response.text or "").strip():
            raise PlanningServiceError(
                "Planning service returned an empty response",
                code="provider_error",
                provider=provider,
            )

        logger.info(
            "Search plan generated",
            extra={
                "extra_fields": {
                    "provider": response.provider,
                    "model": response.model,
                    "latency_ms": response.latency_ms,
                    "tokens": response.token_usage.total_tokens,
                }
            },
        )
        return response.text
