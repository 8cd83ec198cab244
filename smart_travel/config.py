"""
Configuration management for the travel planner.
Supports multiple LLM providers: OpenAI, Mistral, OpenRouter, Ollama, and a deterministic mock.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM Configuration
    llm_provider: Literal["openai", "mistral", "openrouter", "ollama", "mock"] = "openai"
    llm_api_key: Optional[str] = None  # No key means generation runs in fallback mode
    llm_base_url: Optional[str] = None
    llm_model: str = "gpt-3.5-turbo"
    embedding_model: str = "text-embedding-3-small"

    # LLM Parameters
    llm_temperature: float = 0.3
    llm_max_tokens: int = 3000

    # Every generation, embedding and tool call is bounded by this
    external_call_timeout: float = 30.0

    # Planner
    history_limit: int = 10
    knowledge_top_k: int = 2
    default_destination: str = "Paris"

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = True
    log_level: str = "INFO"


# Global settings instance
settings = Settings()


def get_llm_config(config: Optional[Settings] = None) -> dict:
    """Get LLM configuration based on provider."""
    config = config or settings
    llm_config = {
        "api_key": config.llm_api_key,
        "model": config.llm_model,
        "embedding_model": config.embedding_model,
        "temperature": config.llm_temperature,
        "max_tokens": config.llm_max_tokens,
    }

    # Set base URL based on provider
    if config.llm_provider == "ollama":
        llm_config["base_url"] = config.llm_base_url or "http://localhost:11434/v1"
        llm_config["api_key"] = config.llm_api_key or "ollama"  # Ollama accepts any key
    elif config.llm_provider == "mistral":
        llm_config["base_url"] = config.llm_base_url or "https://api.mistral.ai/v1"
    elif config.llm_provider == "openrouter":
        llm_config["base_url"] = config.llm_base_url or "https://openrouter.ai/api/v1"
    else:  # openai
        llm_config["base_url"] = config.llm_base_url or "https://api.openai.com/v1"

    return llm_config
