"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """AI Sales advisor server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default; there is no auth layer in front of the tools.
    aisales_host: str = "127.0.0.1"
    aisales_port: int = 3000
    aisales_log_level: str = "info"
    aisales_allow_insecure_bind: bool = False

    # Live model. "none" (or a provider without a key) means every request is
    # served by the deterministic variant selector.
    llm_provider: Literal["openai", "anthropic", "mock", "none"] = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-2024-08-06"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    llm_timeout_seconds: float = 30.0

    # Sessions
    free_build_limit: int = 1
    history_capacity: int = 12

    # Variant selector
    seed_pool_size: int = 100

    # Uploads staged by the HTTP front end, consumed and deleted by the tools
    upload_dir: str = "~/.aisales/tmp_uploads"

    # Optional override for the YAML template library
    content_dir: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
