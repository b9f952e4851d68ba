"""
Tests for UnifiedResponse Contract

These tests validate that the planning-service clients adhere to the UnifiedResponse contract.
Clients must return UnifiedResponse, handle errors gracefully, and never expose provider-specific fields.
"""

from unittest.mock import Mock, patch

import pytest

from api.google_gemini_client import GeminiClient
from api.openai_client import OpenAIClient
from models.unified_response import NormalizedError, TokenUsage, UnifiedResponse


class TestUnifiedResponseContract:
    """Test that UnifiedResponse carries a consistent structure."""

    def test_unified_response_creation(self):
        response = UnifiedResponse(
            request_id="test-123",
            text="Test response",
            provider="test",
            model="test-model",
            latency_ms=100,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=20, total_tokens=30),
            finish_reason="stop",
            error=None,
        )

        assert response.request_id == "test-123"
        assert response.text == "Test response"
        assert response.token_usage.total_tokens == 30
        assert response.finish_reason == "stop"
        assert response.is_success
        assert not response.is_error
        assert response.timestamp.endswith("Z")

    def test_unified_response_with_error(self):
        error = NormalizedError(
            code="timeout", message="Request timed out", provider="test", retryable=True
        )

        response = UnifiedResponse(
            request_id="test-123",
            text="",
            provider="test",
            model="test-model",
            latency_ms=5000,
            finish_reason="error",
            error=error,
        )

        assert response.is_error
        assert not response.is_success
        assert response.error.retryable
        assert response.token_usage.total_tokens == 0

    def test_token_usage_auto_total(self):
        usage = TokenUsage(prompt_tokens=50, completion_tokens=100)
        assert usage.total_tokens == 150

    def test_normalized_error_validates_code(self):
        assert NormalizedError(code="auth", message="Auth failed", provider="test").code == "auth"
        assert NormalizedError(code="invalid_code", message="Test", provider="test").code == "unknown"

    def test_unknown_finish_reason_kept_in_metadata(self):
        response = UnifiedResponse(
            request_id="test",
            text="test",
            provider="test",
            model="test",
            latency_ms=100,
            finish_reason="invalid_reason",
        )
        assert response.finish_reason is None
        assert response.metadata["provider_finish_reason"] == "invalid_reason"

    def test_to_dict_truncates_long_text(self):
        response = UnifiedResponse(
            request_id="test", text="x" * 500, provider="test", model="test", latency_ms=1
        )
        assert response.to_dict()["text"] == "x" * 200 + "..."


class TestProviderContractCompliance:
    """Test that provider clients return UnifiedResponse."""

    @patch("openai.OpenAI")
    def test_openai_returns_unified_response(self, mock_openai):
        mock_response = Mock()
        mock_response.choices = [Mock(message=Mock(content="Test response"), finish_reason="stop")]
        mock_response.usage = Mock(prompt_tokens=10, completion_tokens=20, total_tokens=30)
        mock_openai.return_value.chat.completions.create.return_value = mock_response

        client = OpenAIClient(api_key="test-key", model_name="gpt-4o-mini")
        response = client.get_completion("Test prompt", temperature=0.2, max_tokens=128)

        assert isinstance(response, UnifiedResponse)
        assert response.provider == "openai"
        assert response.text == "Test response"
        assert response.token_usage.total_tokens == 30
        assert response.finish_reason == "stop"
        assert response.is_success

        kwargs = mock_openai.return_value.chat.completions.create.call_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 128

    @patch("openai.OpenAI")
    def test_openai_handles_errors_gracefully(self, mock_openai):
        mock_openai.return_value.chat.completions.create.side_effect = Exception("API Error")

        client = OpenAIClient(api_key="test-key")
        response = client.get_completion("Test prompt")

        assert isinstance(response, UnifiedResponse)
        assert response.is_error
        assert response.error.provider == "openai"
        assert response.finish_reason == "error"
        assert response.text == ""

    @patch("google.genai.Client")
    def test_gemini_returns_unified_response(self, mock_genai):
        mock_response = Mock()
        mock_response.text = "Test response"
        mock_response.usage_metadata = Mock(
            prompt_token_count=10, candidates_token_count=20, total_token_count=30
        )
        mock_response.candidates = [Mock(finish_reason="STOP")]
        mock_genai.return_value.models.generate_content.return_value = mock_response

        client = GeminiClient(api_key="test-key", model_name="gemini-1.5-flash")
        response = client.get_completion("Test prompt", max_tokens=512)

        assert response.provider == "gemini"
        assert response.text == "Test response"
        assert response.token_usage.total_tokens == 30
        assert response.finish_reason == "stop"
        assert response.is_success

        config = mock_genai.return_value.models.generate_content.call_args.kwargs["config"]
        assert config["max_output_tokens"] == 512

    @patch("google.genai.Client")
    def test_gemini_handles_errors_gracefully(self, mock_genai):
        mock_genai.return_value.models.generate_content.side_effect = Exception(
            "503 Service Unavailable"
        )

        client = GeminiClient(api_key="test-key")
        response = client.get_completion("Test prompt")

        assert response.is_error
        assert response.error.code == "provider_error"
        assert response.error.retryable is True
        assert response.error.status_code == 503

    def test_gemini_requires_api_key(self):
        with pytest.raises(ValueError):
            GeminiClient(api_key="")


class TestErrorHandlingContract:
    """Test that errors are handled according to contract."""

    @pytest.mark.parametrize(
        "message,code,retryable",
        [
            ("Request timed out", "timeout", True),
            ("401 Unauthorized", "auth", False),
            ("429 Too Many Requests", "rate_limit", True),
            ("400 Bad Request", "bad_request", False),
            ("503 Service Unavailable", "provider_error", True),
        ],
    )
    @patch("openai.OpenAI")
    def test_errors_normalized(self, mock_openai, message, code, retryable):
        mock_openai.return_value.chat.completions.create.side_effect = Exception(message)

        client = OpenAIClient(api_key="test-key")
        response = client.get_completion("Test")

        assert response.is_error
        assert response.error.code == code
        assert response.error.retryable is retryable

    @patch("openai.OpenAI")
    def test_status_code_attribute_preferred(self, mock_openai):
        class FakeStatusError(Exception):
            status_code = 429

        mock_openai.return_value.chat.completions.create.side_effect = FakeStatusError("slow down")

        response = OpenAIClient(api_key="test-key").get_completion("Test")

        assert response.error.code == "rate_limit"
        assert response.error.status_code == 429


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
