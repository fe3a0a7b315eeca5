"""Application configuration managed via environment variables."""
from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Index Intellect Backend"
    debug: bool = False
    log_level: str = "INFO"
    llm_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "LLM_API_KEY"),
    )
    llm_base_url: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    llm_model: str = "gemini-2.5-flash"
    llm_temperature: float = 0.7
    llm_max_output_tokens: int = 4096
    llm_timeout_seconds: float = 60.0
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]
    max_sprints: int = 12
    backend_url: str = "http://localhost:3001"
    backend_timeout_seconds: float = 90.0
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "index-intellect"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
