import pytest
from dotenv import load_dotenv

from config.pipeline import PipelineSettings
from fakes import FakeLLMClient, GitHubStub

# Load environment variables from .env file for tests
load_dotenv()


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "MODEL_TYPE": "gemini",
        "GEMINI_LLM_API_KEY": "test-api-key",
        "GEMINI_MODEL": "gemini-test",
        "GITHUB_TOKEN": "ghp_test",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings():
    """Small, fast pipeline settings independent of pipeline.yaml edits."""
    return PipelineSettings(
        enrich_limit=10,
        compare_limit=5,
        max_concurrency=3,
        task_timeout_s=5.0,
        preview_lines=3,
        planning_timeout_s=5.0,
        languages={"js": "javascript", "py": "python", "ts": "typescript"},
    )


@pytest.fixture
def github_stub():
    return GitHubStub()


@pytest.fixture
def fake_llm():
    return FakeLLMClient()
