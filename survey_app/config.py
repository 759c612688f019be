"""Application configuration management using Pydantic Settings.

This module loads and validates environment variables using Pydantic Settings.
All configuration is loaded from environment variables or a .env file.
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        database_url: SQLAlchemy URL of the warehouse holding survey responses
        database_pool_size: Number of connections to maintain in pool
        database_max_overflow: Maximum overflow connections beyond pool_size
        responses_table: Default table read by the survey-responses API
        responses_timestamp_column: Timestamp column of the responses table
        default_query_limit: Row limit applied when a query sets none
        environment: Application environment (development, staging, production, test)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        surveys_dir: Path to directory containing survey JSON/YAML documents
        api_prefix: Mount point of the survey-responses routes
        allowed_origins: List of allowed CORS origins
    """

    # Warehouse Configuration
    database_url: str = Field(
        default="sqlite:///./survey_responses.db",
        description="Warehouse connection string"
    )
    database_pool_size: int = Field(
        default=5,
        description="Number of database connections in pool"
    )
    database_max_overflow: int = Field(
        default=10,
        description="Maximum overflow connections beyond pool size"
    )
    responses_table: str = Field(
        default="GAME_DATA",
        description="Table holding submitted survey responses"
    )
    responses_timestamp_column: str = Field(
        default="timestamp",
        description="Column used for date filters and ordering"
    )
    default_query_limit: int = Field(
        default=1000,
        ge=1,
        description="Row limit used when a query does not set one"
    )

    # Application Configuration
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    surveys_dir: str = Field(
        default="./surveys",
        description="Path to surveys directory"
    )
    api_prefix: str = Field(
        default="/api/survey-responses",
        description="Prefix for the survey-responses routes"
    )
    allowed_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v_upper

    @field_validator("responses_timestamp_column")
    @classmethod
    def validate_timestamp_column(cls, v: str) -> str:
        """Ensure the column name is a plain SQL identifier."""
        if not v.replace("_", "").isalnum():
            raise ValueError("Timestamp column must be alphanumeric with underscores")
        return v

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Ensure the prefix is rooted and has no trailing slash."""
        v = "/" + v.strip("/")
        if v == "/":
            raise ValueError("API prefix cannot be empty")
        return v

    def get_allowed_origins_list(self) -> List[str]:
        """Parse allowed_origins string into a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton

    Note:
        Uses lru_cache to ensure settings are only loaded once
        and shared across the application.
    """
    return Settings()
