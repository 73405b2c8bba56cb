"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Advisor configuration. All values come from environment variables."""

    # Language model
    llm_provider: str = Field(default="openai")
    openai_api_key: str = Field(default="")
    openai_chat_model: str = Field(default="gpt-4.1-mini")
    anthropic_api_key: str = Field(default="")
    claude_model: str = Field(default="claude-sonnet-4-5-20250929")
    completion_temperature: float = Field(default=0.7)
    completion_max_tokens: int = Field(default=2000)

    # Embeddings
    embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=1536)

    # Database
    database_path: Path = Field(default=Path("data/advisor.db"))

    # Turso (hosted libSQL); overrides database_path when set
    turso_database_url: str = Field(default="")
    turso_auth_token: str = Field(default="")

    # Google (token file produced by an external OAuth flow)
    google_token_path: Path = Field(default=Path("auth_tokens/google_auth_token.json"))
    calendar_time_zone: str = Field(default="America/New_York")

    # HubSpot
    hubspot_access_token: str = Field(default="")
    hubspot_api_url: str = Field(default="https://api.hubapi.com")

    # Retrieval
    context_limit: int = Field(default=5)
    context_max_tokens: int = Field(default=4000)
    chunk_size: int = Field(default=1000)
    chunk_overlap: int = Field(default=200)

    # Conversation
    history_window: int = Field(default=10)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    def llm_credential(self) -> str:
        """Return the API key for the active completion provider ('' if unset)."""
        if self.llm_provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key


settings = Settings()
