"""Configuration settings using Pydantic BaseSettings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Authentication Configuration
    jwt_secret: str = Field(..., min_length=1, description="Secret used to sign session tokens")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_expires_minutes: int = Field(default=60, ge=1, description="Session token lifetime in minutes")

    # Language Model Configuration
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key for task suggestions")
    model_name: str = Field(default="gpt-4o-mini", description="OpenAI model name for suggestions")
    suggestion_temperature: float = Field(default=0.4, description="Sampling temperature for suggestions")
    suggestion_timeout: float = Field(default=30.0, description="Per-request timeout for the model call in seconds")
    suggestion_max_retries: int = Field(default=5, ge=0, description="Retries after a throttled model call")
    suggestion_initial_delay: float = Field(default=2.0, ge=0, description="First backoff delay in seconds")

    # Application Configuration
    app_host: str = Field(default="0.0.0.0", description="FastAPI host")
    app_port: int = Field(default=5000, description="FastAPI port")
    debug: bool = Field(default=False, description="Enable debug mode")
    environment: str = Field(default="development", description="Deployment environment name")
    cors_origins: List[str] = Field(default=["*"], description="Allowed CORS origins")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")
