import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GITHUB_API_BASE_URL = "https://api.github.com"
PLACEHOLDER_GITHUB_TOKEN = "YOUR_GITHUB_TOKEN_HERE"


class ModelType(Enum):
    """Supported planning-service providers."""
    GEMINI = "gemini"
    OPENAI = "openai"


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # GitHub
        token = (os.getenv('GITHUB_TOKEN') or '').strip()
        self.GITHUB_TOKEN = token if token and token != PLACEHOLDER_GITHUB_TOKEN else None
        self.GITHUB_API_BASE_URL = os.getenv('GITHUB_API_BASE_URL', DEFAULT_GITHUB_API_BASE_URL)

        # Planning service (LLM)
        self.GEMINI_LLM_API_KEY = os.getenv('GEMINI_LLM_API_KEY')
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.MODEL_TYPE = os.getenv('MODEL_TYPE', ModelType.GEMINI.value).lower()
        self.GEMINI_MODEL = os.getenv('GEMINI_MODEL', 'gemini-1.5-flash')
        self.OPENAI_MODEL = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

        if self.MODEL_TYPE == ModelType.OPENAI.value:
            self.DEFAULT_MODEL = self.OPENAI_MODEL
        else:
            self.DEFAULT_MODEL = self.GEMINI_MODEL

        # Optional override of the pipeline policy file
        self.PIPELINE_CONFIG_PATH = os.getenv('PIPELINE_CONFIG_PATH')

    def validate(self) -> bool:
        """
        Validate that all required configuration is present based on the selected model type.

        A missing GitHub token is not fatal (unauthenticated search works with a much
        lower rate limit) but is logged.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.GITHUB_TOKEN:
            logger.warning("GITHUB_TOKEN is not configured; GitHub requests will be unauthenticated")

        if self.MODEL_TYPE == ModelType.GEMINI.value:
            if not self.GEMINI_LLM_API_KEY:
                logger.error("GEMINI_LLM_API_KEY is not set")
                return False
        elif self.MODEL_TYPE == ModelType.OPENAI.value:
            if not self.OPENAI_API_KEY:
                logger.error("OPENAI_API_KEY is not set")
                return False
        else:
            logger.error(
                f"Unknown MODEL_TYPE '{self.MODEL_TYPE}'. "
                f"Must be one of: {', '.join([e.value for e in ModelType])}"
            )
            return False

        return True

    def get_model_info(self) -> str:
        """
        Get information about the currently selected planning model.

        Returns:
            str: Formatted string with model information
        """
        if self.MODEL_TYPE == ModelType.GEMINI.value:
            return f"Google Gemini ({self.DEFAULT_MODEL})"
        elif self.MODEL_TYPE == ModelType.OPENAI.value:
            return f"OpenAI ({self.DEFAULT_MODEL})"
        return "Unknown"
