"""
Request-level errors raised by the search pipeline.

Per-item failures during enrichment or comparison are never raised; they are
represented as data on the individual result instead.
"""

from datetime import datetime, timezone


class CodeSearchError(Exception):
    """Base class for errors that abort a whole search or comparison request."""

    def __init__(self, message: str, *, query_string: str | None = None):
        super().__init__(message)
        self.message = message
        self.query_string = query_string


class QueryValidationError(CodeSearchError):
    """The caller supplied an empty or otherwise unusable input."""


class PlanningServiceError(CodeSearchError):
    """The planning service (LLM) call itself failed."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "unknown",
        status_code: int | None = None,
        provider: str | None = None,
        query_string: str | None = None,
    ):
        super().__init__(message, query_string=query_string)
        self.code = code
        self.status_code = status_code
        self.provider = provider


class PlanParseError(CodeSearchError):
    """The planning service answered, but the answer is not a valid plan."""

    def __init__(self, message: str, *, raw_text: str = "", query_string: str | None = None):
        super().__init__(message, query_string=query_string)
        self.raw_text = raw_text


class UpstreamError(CodeSearchError):
    """Non-success response (or transport failure) from the GitHub API."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
        query_string: str | None = None,
    ):
        super().__init__(message, query_string=query_string)
        self.status_code = status_code
        self.url = url


class RateLimited(CodeSearchError):
    """The GitHub API refused the request because the quota is exhausted."""

    def __init__(
        self,
        message: str,
        *,
        reset_at: datetime | None = None,
        status_code: int = 403,
        url: str | None = None,
        query_string: str | None = None,
    ):
        super().__init__(message, query_string=query_string)
        self.reset_at = reset_at
        self.status_code = status_code
        self.url = url

    def retry_after_seconds(self, now: datetime | None = None) -> int | None:
        """Seconds until the quota resets, or None when the reset time is unknown."""
        if self.reset_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return max(0, int((self.reset_at - now).total_seconds()))
