"""Factories for the process-wide planning-service and GitHub clients."""

from config.config import Config, ModelType
from config.pipeline import PipelineSettings
from utils.logger import get_logger

from .base_client import BaseAIClient
from .github_client import GitHubClient

logger = get_logger(__name__)


def create_llm_client(config: Config) -> BaseAIClient:
    """
    Initialize the planning-service client selected by MODEL_TYPE.

    Raises:
        ValueError: If the model type is unsupported or its API key is missing
    """
    model_type = config.MODEL_TYPE

    if model_type == ModelType.GEMINI.value:
        from .google_gemini_client import GeminiClient

        if not config.GEMINI_LLM_API_KEY:
            raise ValueError("GEMINI_LLM_API_KEY not found in environment variables")
        client = GeminiClient(api_key=config.GEMINI_LLM_API_KEY, model_name=config.GEMINI_MODEL)

    elif model_type == ModelType.OPENAI.value:
        from .openai_client import OpenAIClient

        if not config.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY not found in environment variables")
        client = OpenAIClient(api_key=config.OPENAI_API_KEY, model_name=config.OPENAI_MODEL)

    else:
        raise ValueError(
            f"Unsupported MODEL_TYPE: {model_type}. "
            f"Must be one of: {', '.join(e.value for e in ModelType)}"
        )

    logger.info(f"Planning service client initialized: {config.get_model_info()}")
    return client


def create_github_client(config: Config, settings: PipelineSettings) -> GitHubClient:
    return GitHubClient(
        token=config.GITHUB_TOKEN,
        base_url=config.GITHUB_API_BASE_URL,
        timeout_s=settings.http_timeout_s,
    )
