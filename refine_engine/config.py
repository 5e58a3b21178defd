"""
Configuration settings for the Refine Engine
"""
import os
import logging
from typing import Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()

# Configure basic logger for config module
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Provider selection: "openai" (chat completions) or "anthropic"
    LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "openai")

    # API Keys
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    ANTHROPIC_API_KEY: str = os.getenv("ANTHROPIC_API_KEY", "")

    # Chat completions endpoint (any OpenAI-compatible API)
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

    # Claude
    ANTHROPIC_MODEL: str = os.getenv("ANTHROPIC_MODEL", "claude-3-5-haiku-20241022")
    ANTHROPIC_MAX_TOKENS: int = 4096  # required by the messages API

    # Default timeout of the shared HTTP client, in seconds
    PROVIDER_TIMEOUT: float = float(os.getenv("PROVIDER_TIMEOUT", "180"))

    # Idea length bounds, shared by the API and the client session
    MIN_IDEA_LENGTH: int = 10
    MAX_IDEA_LENGTH: int = 500

    # Rate limiting
    RATE_LIMIT: str = os.getenv("RATE_LIMIT", "10/minute")
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "development")
    SENTRY_TRACES_SAMPLE_RATE: float = float(
        os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.1")
    )

    # CORS - comma-separated list of allowed origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000"
    )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def provider_api_key(self) -> str:
        """Credential for the selected provider"""
        if self.LLM_PROVIDER == "anthropic":
            return self.ANTHROPIC_API_KEY
        return self.OPENAI_API_KEY

    @property
    def provider_model(self) -> str:
        """Model identifier for the selected provider"""
        if self.LLM_PROVIDER == "anthropic":
            return self.ANTHROPIC_MODEL
        return self.OPENAI_MODEL


SUPPORTED_PROVIDERS = ("openai", "anthropic")


# Global settings instance
settings = Settings()


def validate_required_config(config: Optional[Settings] = None):
    """Validate required configuration on startup"""
    config = config or settings
    errors = []

    if config.LLM_PROVIDER not in SUPPORTED_PROVIDERS:
        errors.append(f"Unknown LLM_PROVIDER '{config.LLM_PROVIDER}' (expected openai or anthropic)")
    elif not config.provider_api_key:
        key_name = "ANTHROPIC_API_KEY" if config.LLM_PROVIDER == "anthropic" else "OPENAI_API_KEY"
        errors.append(f"{key_name} must be configured")

    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        if config.ENVIRONMENT == "production":
            raise ValueError(f"Missing required configuration: {', '.join(errors)}")

    return len(errors) == 0
