"""
Configuration management using Pydantic Settings.

All configuration is loaded from environment variables with sensible defaults.
Use a .env file for local development.

Environment Variables:
    GOOGLE_API_KEY: Generative-language API key (embeddings and generation)
    EMBEDDING_MODEL: Model used for the :embedText endpoint
    CHAT_MODEL: Model used for the :generateText endpoint
    CHUNK_SIZE: Window size in characters for policy chunks
    CHUNK_OVERLAP: Overlap between consecutive windows
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # API Keys
    # ==========================================================================
    google_api_key: Optional[SecretStr] = Field(
        default=None,
        description="Google generative-language API key",
    )

    # ==========================================================================
    # Model Configuration
    # ==========================================================================
    google_api_base: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta2",
        description="Base URL of the generative-language REST API",
    )
    embedding_model: str = Field(
        default="textembedding-gecko@001",
        description="Model ID for policy chunk and question embeddings",
    )
    chat_model: str = Field(
        default="text-bison-001",
        description="Model ID for answer generation",
    )
    llm_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for answer generation",
    )
    llm_max_output_tokens: int = Field(
        default=600,
        ge=1,
        le=8192,
        description="Maximum tokens for a generated answer",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout in seconds for each outbound API call",
    )

    # ==========================================================================
    # Chunking Configuration
    # ==========================================================================
    chunk_size: int = Field(
        default=1000,
        ge=200,
        le=8000,
        description="Window size in characters for policy chunks",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Characters shared by consecutive windows",
    )

    # ==========================================================================
    # Retrieval Configuration
    # ==========================================================================
    retrieval_top_k: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Number of policy chunks used as answer context",
    )
    similarity_threshold: float = Field(
        default=0.68,
        ge=-1.0,
        le=1.0,
        description="Best-match cosine score below which the assistant declines to answer",
    )

    # ==========================================================================
    # API Configuration
    # ==========================================================================
    api_host: str = Field(
        default="0.0.0.0",
        description="Host to bind API server",
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for API server",
    )

    # ==========================================================================
    # Observability Configuration
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("chunk_overlap")
    @classmethod
    def validate_chunk_overlap(cls, v: int, info) -> int:
        """Ensure overlap is less than chunk size."""
        chunk_size = info.data.get("chunk_size", 1000)
        if v >= chunk_size:
            raise ValueError(f"chunk_overlap ({v}) must be less than chunk_size ({chunk_size})")
        return v

    @field_validator("google_api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def google_api_key_value(self) -> Optional[str]:
        """Get the actual API key value (use sparingly)."""
        if self.google_api_key:
            return self.google_api_key.get_secret_value()
        return None


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Call `get_settings.cache_clear()` to reload settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
