"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class BlobBackend(str, Enum):
    """Where generated and uploaded artifacts live."""
    LOCAL = "local"
    S3 = "s3"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


class Settings(BaseSettings):
    """
    Application settings with validation.

    Every external collaborator (model, rendering service, blob store) is
    configured here, together with the timeouts and retry ceilings that bound
    calls to it.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./cvtrail.db",
        description="Database connection URL"
    )
    # Connection pool tuning (PostgreSQL only; ignored for SQLite).
    db_pool_size: int = Field(
        default=5,
        description="Number of persistent database connections"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections allowed during traffic bursts"
    )
    db_pool_timeout: int = Field(
        default=30,
        description="Seconds to wait for a connection from the pool before raising"
    )
    db_pool_recycle: int = Field(
        default=1800,
        description="Seconds before a connection is recycled (prevents stale connections)"
    )

    # Versioning transaction retries.
    # Contention on a document's analysis counter is retried with exponential
    # backoff: base * 2**attempt, capped at txn_backoff_max_seconds.
    txn_max_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts before a contended versioning transaction gives up"
    )
    txn_backoff_base_seconds: float = Field(
        default=0.05,
        ge=0,
        description="Initial backoff between contended transaction attempts"
    )
    txn_backoff_max_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Upper bound for a single backoff sleep"
    )

    # Generative model (LiteLLM model string, e.g. "vertex_ai/gemini-2.5-flash")
    generation_model: str = Field(
        default="vertex_ai/gemini-2.5-flash",
        description="LiteLLM model used for resume review and enhancement"
    )
    llm_api_key: str = Field(
        default="",
        description="API key for the model provider (empty = provider default credentials)"
    )
    llm_api_base: str = Field(
        default="",
        description="Base URL for the model provider (optional)"
    )
    llm_timeout_seconds: float = Field(
        default=60,
        description="Seconds before a model call is abandoned"
    )
    llm_temperature: float = Field(
        default=0.2,
        description="Sampling temperature for review generation"
    )

    # External rendering service (text -> PDF)
    render_service_url: str = Field(
        default="",
        description="URL of the txt_to_pdf rendering endpoint"
    )
    render_timeout_seconds: float = Field(
        default=60,
        description="Seconds before a rendering call is abandoned"
    )
    artifact_fetch_timeout_seconds: float = Field(
        default=60,
        description="Seconds before downloading a rendered artifact is abandoned"
    )

    # Blob storage
    blob_backend: BlobBackend = Field(
        default=BlobBackend.LOCAL,
        description="Blob storage backend: 'local' filesystem or 's3'"
    )
    blob_root: str = Field(
        default="./blobs",
        description="Root directory for the local blob backend"
    )
    default_bucket: str = Field(
        default="cvtrail-uploads",
        description="Bucket used when a request does not name one"
    )
    s3_region: str = Field(
        default="us-east-1",
        description="AWS region for the S3 blob backend"
    )

    # Resume text shorter than this is analyzed anyway but logged as suspicious.
    min_resume_text_length: int = Field(
        default=100,
        description="Extracted text length below which a warning is logged"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    def configuration_problems(self) -> list[str]:
        """List settings that are unusable outside development."""
        problems: list[str] = []

        if not self.render_service_url:
            problems.append(
                "RENDER_SERVICE_URL is empty. "
                "Resume generation will fail at the rendering step."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            problems.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        return problems

    def validate_production_config(self) -> None:
        """Validate configuration for production environment.

        In production, fails startup if required settings are missing.
        In development, returns quietly — main.py logs the problems as warnings.

        Raises:
            ConfigurationError: If production config is incomplete.
        """
        errors = self.configuration_problems()
        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is invalid:\n  - " + "\n  - ".join(errors)
            )

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
