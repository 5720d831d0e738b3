"""Application configuration."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Feedback Translator"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./feedback_translator.db"

    # LLM backend
    llm_provider: str = "gemini"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.2
    llm_max_tokens: int = 8192
    llm_base_url: Optional[str] = None

    # LLM API Keys (the one matching llm_provider is used)
    gemini_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # Retry settings
    max_retries: int = 3
    retry_base_delay_ms: int = 1000
    retry_max_jitter_ms: int = 1000

    # Intake limits
    max_source_chars: int = 50_000
    max_file_size_bytes: int = 10 * 1024 * 1024

    # Background processing
    worker_concurrency: int = 1
    stale_job_timeout_seconds: int = 900  # PROCESSING jobs older than this are failed
    reaper_interval_seconds: int = 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def get_api_key(self, provider: Optional[str] = None) -> Optional[str]:
        """Get API key for a provider (defaults to the configured one)."""
        key_map = {
            "gemini": self.gemini_api_key,
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
        }
        return key_map.get(provider or self.llm_provider)


settings = Settings()
