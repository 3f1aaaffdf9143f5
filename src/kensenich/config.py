"""
KensenichManager - Configuration and settings.

All settings come from the environment or a local .env file.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Nothing is required: the app runs against a local SQLite file and
    the assistant endpoints only need OPENAI_API_KEY (or LLM_BASE_URL
    pointing at an OpenAI-compatible server such as Ollama).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    kensenich_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Storage
    database_path: str = "data/kensenich.db"

    # LLM provider (OpenAI or any OpenAI-compatible endpoint)
    openai_api_key: str | None = None
    llm_base_url: str | None = None
    llm_model: str = "gpt-4.1-mini"
    llm_temperature: float = 0.5

    # Assistant
    assistant_name: str = "Bratan"
    assistant_language: str = "German"
    agent_max_tool_rounds: int = 2

    # n8n automation
    n8n_webhook_url: str = "http://localhost:5678"

    # Web server
    cors_origins: list[str] = ["*"]
    host: str = "127.0.0.1"
    port: int = 3001

    @property
    def is_development(self) -> bool:
        return self.kensenich_env == "development"

    @property
    def is_production(self) -> bool:
        return self.kensenich_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
