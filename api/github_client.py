"""Async GitHub REST client for the search and contents endpoints."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import quote

import httpx

from models.errors import RateLimited, UpstreamError
from utils.logger import get_logger

logger = get_logger(__name__)

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"
DEFAULT_ACCEPT = "application/vnd.github+json"
TEXT_MATCH_ACCEPT = "application/vnd.github.text-match+json"
DEFAULT_TIMEOUT_S = 15.0


def parse_rate_limit_reset(value: str | None) -> datetime | None:
    """Parse an `X-RateLimit-Reset` header (epoch seconds) into a UTC datetime."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value.strip()), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _retry_after_reset(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.now(timezone.utc) + timedelta(seconds=int(value.strip()))
    except ValueError:
        return None


class GitHubClient:
    """
    Thin async wrapper over the GitHub REST API.

    One instance is created per process and shared by every pipeline component;
    it owns a pooled httpx.AsyncClient and must be closed with `aclose()`.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the GitHub client.

        Args:
            token: Personal access token; requests are unauthenticated when omitted
            base_url: API root (GitHub Enterprise installs use their own)
            timeout_s: Transport timeout applied to every request
            transport: Optional httpx transport (used by tests)
        """
        headers = {
            "Accept": DEFAULT_ACCEPT,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("GitHub API token is not configured; using unauthenticated requests")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- API Methods ---

    async def search_code(self, query: str, per_page: int | None = None) -> dict[str, Any]:
        """Search file contents (`/search/code`) with GitHub search syntax."""
        return await self.search("code", query, per_page=per_page, accept=TEXT_MATCH_ACCEPT)

    async def search_repositories(self, query: str, per_page: int | None = None) -> dict[str, Any]:
        """Search repositories (`/search/repositories`)."""
        return await self.search("repositories", query, per_page=per_page)

    async def search(
        self,
        endpoint: str,
        query: str,
        per_page: int | None = None,
        accept: str | None = None,
    ) -> dict[str, Any]:
        # The query is percent-encoded as a whole, qualifiers included
        path = f"/search/{endpoint}?q={quote(query, safe='')}"
        if per_page:
            path += f"&per_page={int(per_page)}"

        payload = await self.get_json(path, accept=accept, query_string=query)
        if not isinstance(payload, dict):
            raise UpstreamError(
                "GitHub API returned an unexpected search payload",
                status_code=None,
                url=path,
                query_string=query,
            )
        return payload

    async def get_json(
        self, url: str, accept: str | None = None, query_string: str | None = None
    ) -> Any:
        """
        GET an API resource (absolute API URL or path) and decode its JSON body.

        Returns None for 204 responses.

        Raises:
            RateLimited: quota exhausted (403/429 with zero remaining requests)
            UpstreamError: any other non-success response or transport failure
        """
        headers = {"Accept": accept} if accept else None
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.TimeoutException as e:
            logger.warning(
                "GitHub request timed out",
                extra={"extra_fields": {"url": url, "error_type": type(e).__name__}},
            )
            raise UpstreamError(
                f"GitHub request timed out: {url}", url=url, query_string=query_string
            ) from e
        except httpx.HTTPError as e:
            logger.warning(
                "GitHub request failed",
                extra={"extra_fields": {"url": url, "error": str(e), "error_type": type(e).__name__}},
            )
            raise UpstreamError(
                f"GitHub request failed: {e!s}", url=url, query_string=query_string
            ) from e

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise UpstreamError(
                    "GitHub API returned invalid JSON",
                    status_code=response.status_code,
                    url=url,
                    query_string=query_string,
                ) from e

        self._raise_for_error(response, url, query_string)

    def _raise_for_error(self, response: httpx.Response, url: str, query_string: str | None):
        status = response.status_code
        remaining = response.headers.get("X-RateLimit-Remaining")
        retry_after = response.headers.get("Retry-After")

        if status in (403, 429) and (remaining == "0" or retry_after):
            reset_at = parse_rate_limit_reset(response.headers.get("X-RateLimit-Reset"))
            if reset_at is None:
                reset_at = _retry_after_reset(retry_after)
            reset_label = reset_at.isoformat() if reset_at else "unknown"
            logger.error(
                f"GitHub API rate limit exceeded. Resets at: {reset_label}",
                extra={"extra_fields": {"url": url, "status_code": status, "reset_at": reset_label}},
            )
            raise RateLimited(
                f"GitHub API rate limit exceeded. Resets at: {reset_label}",
                reset_at=reset_at,
                status_code=status,
                url=url,
                query_string=query_string,
            )

        upstream_message = response.reason_phrase or "Unknown error"
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                upstream_message = str(body["message"])
        except ValueError:
            if response.text:
                upstream_message = response.text[:500]

        logger.error(
            f"GitHub API error ({status}): {upstream_message}",
            extra={"extra_fields": {"url": url, "status_code": status}},
        )
        raise UpstreamError(
            f"GitHub API error: {status} - {upstream_message}",
            status_code=status,
            url=url,
            query_string=query_string,
        )
