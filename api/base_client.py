import time
import uuid
from abc import ABC, abstractmethod
from typing import Any

from models.unified_response import NormalizedError, TokenUsage, UnifiedResponse


class BaseAIClient(ABC):
    """
    Abstract base class for planning-service (LLM) clients.

    Implementations return a UnifiedResponse for every call and never raise:
    failures are reported through UnifiedResponse.error.
    """

    provider_name: str = "unknown"

    @abstractmethod
    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the AI client.

        Args:
            api_key: API key for the AI service
            **kwargs: Additional model-specific parameters
        """
        self.api_key = api_key
        self.model_name = kwargs.get('model_name')

    @abstractmethod
    def get_completion(self, prompt: str, **kwargs) -> UnifiedResponse:
        """
        Get a single, non-streaming completion from the model.

        Args:
            prompt: The input prompt to send to the model
            **kwargs: Additional parameters for the API call
                - model: Override the default model for this call
                - temperature: Sampling temperature
                - max_tokens: Maximum number of tokens to generate

        Returns:
            UnifiedResponse with the generated text or a NormalizedError
        """

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())

    def _measure_latency(self, start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    def _normalize_finish_reason(self, reason: Any, provider: str) -> str | None:
        if reason is None:
            return None
        value = str(getattr(reason, "value", reason)).lower()
        mapping = {
            "stop": "stop",
            "end_turn": "stop",
            "length": "length",
            "max_tokens": "length",
            "content_filter": "content_filter",
            "safety": "content_filter",
            "recitation": "content_filter",
        }
        return mapping.get(value, value)

    def _normalize_error(self, exc: Exception, provider: str) -> NormalizedError:
        """
        Map an SDK exception onto the normalized error taxonomy.

        The upstream HTTP status is taken from the exception when the SDK exposes
        it (`status_code` on openai errors, `code` on google-genai errors) and
        otherwise inferred from the message.
        """
        message = str(exc) or type(exc).__name__
        lowered = message.lower()
        status_code = _extract_status_code(exc)

        if isinstance(exc, TimeoutError) or "timed out" in lowered or "timeout" in lowered:
            code, retryable = "timeout", True
        elif status_code in (401, 403) or "401" in lowered or "unauthorized" in lowered \
                or "api key" in lowered or "permission" in lowered:
            code, retryable = "auth", False
        elif status_code == 429 or "429" in lowered or "rate limit" in lowered \
                or "quota" in lowered or "resource_exhausted" in lowered:
            code, retryable = "rate_limit", True
        elif status_code in (400, 404, 422) or "400" in lowered or "bad request" in lowered \
                or "invalid" in lowered:
            code, retryable = "bad_request", False
        elif (status_code is not None and status_code >= 500) or any(
            marker in lowered for marker in ("500", "502", "503", "504", "unavailable", "overloaded")
        ):
            code, retryable = "provider_error", True
        else:
            code, retryable = "unknown", False

        if status_code is None:
            status_code = _infer_status_code(lowered)

        return NormalizedError(
            code=code,
            message=message,
            provider=provider,
            retryable=retryable,
            status_code=status_code,
            details={"exception_type": type(exc).__name__},
        )

    def _create_error_response(
        self, request_id: str, error: NormalizedError, latency_ms: int, model: str | None
    ) -> UnifiedResponse:
        return UnifiedResponse(
            request_id=request_id,
            text="",
            provider=self.provider_name,
            model=model or self.model_name or "unknown",
            latency_ms=latency_ms,
            token_usage=TokenUsage(),
            finish_reason="error",
            error=error,
        )


def _extract_status_code(exc: Exception) -> int | None:
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool) and 100 <= value < 600:
            return value
    return None


def _infer_status_code(lowered_message: str) -> int | None:
    for status in (400, 401, 403, 404, 429, 500, 502, 503, 504):
        if str(status) in lowered_message:
            return status
    return None
