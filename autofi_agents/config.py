"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe, validated configuration for the entire package.
All environment variables are loaded and validated here. Every field has a
default so the package can be imported (and tested) without any secrets.
"""
from typing import Literal, Optional
from pydantic import Field, ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application configuration with validation.

    All settings are loaded from environment variables (.env file).
    Pydantic validates types and provides defaults.
    """

    # Google Cloud Platform (Gemini decision engine)
    gcp_project_id: Optional[str] = Field(
        default=None,
        description="GCP Project ID. When unset the CLI falls back to the static engine"
    )
    gcp_location: str = Field(default="us-central1", description="GCP region")
    agent_model: str = Field(
        default="gemini-2.5-flash",
        description="LLM model used by the Gemini decision engine"
    )

    # Decision engine resilience
    llm_timeout: int = Field(
        default=30,
        ge=5,
        le=120,
        description="Timeout for LLM calls in seconds"
    )
    llm_max_retries: int = Field(
        default=3,
        ge=1,
        le=5,
        description="Max retry attempts for LLM calls"
    )
    llm_rate_limit: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Max concurrent LLM calls (prevents API saturation)"
    )

    # Swarm
    swarm_max_agents: int = Field(
        default=10,
        ge=1,
        description="Default agent capacity of a swarm"
    )
    swarm_max_cascade: int = Field(
        default=256,
        ge=1,
        description="Max deliveries drained in one re-entrant dispatch cascade"
    )
    swarm_message_ttl_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Retention window used by prune_message_log (None keeps everything)"
    )

    # Langfuse Observability (optional)
    langfuse_public_key: Optional[str] = Field(default=None, description="Langfuse public key")
    langfuse_secret_key: Optional[str] = Field(default=None, description="Langfuse secret key")
    langfuse_host: str = Field(
        default="https://cloud.langfuse.com",
        description="Langfuse host URL"
    )

    # Application
    app_name: str = Field(
        default="autofi_agents",
        description="Application name for tracing"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level"
    )

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env that aren't defined here
    )


# Global settings instance (loaded once)
settings = Settings()
