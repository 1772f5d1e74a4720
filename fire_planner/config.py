"""Application configuration management using Pydantic Settings."""

from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application Environment
    app_env: str = Field(default="development", alias="APP_ENV")

    # Flask Configuration
    secret_key: str = Field(default=PLACEHOLDER_SECRET_KEY, alias="SECRET_KEY")

    # Storage Configuration
    storage_type: str = Field(default="local", alias="STORAGE_TYPE")
    storage_base_path: str = Field(default="storage", alias="STORAGE_BASE_PATH")

    # Logging Configuration
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Planning Engine Configuration
    default_assumptions_id: str = Field(
        default="AUS_2025_26", alias="DEFAULT_ASSUMPTIONS_ID"
    )
    monte_carlo_default_runs: int = Field(
        default=1000, gt=0, alias="MONTE_CARLO_DEFAULT_RUNS"
    )
    monte_carlo_max_runs: int = Field(default=10000, gt=0, alias="MONTE_CARLO_MAX_RUNS")
    monte_carlo_max_workers: int = Field(
        default=4, ge=1, le=64, alias="MONTE_CARLO_MAX_WORKERS"
    )
    monte_carlo_batch_size: int = Field(
        default=250, ge=1, alias="MONTE_CARLO_BATCH_SIZE"
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Ensure SECRET_KEY is not empty."""
        if not v:
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        """Validate application environment."""
        allowed_envs = {"development", "testing", "production"}
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of {allowed_levels}")
        return v.upper()

    @field_validator("storage_type")
    @classmethod
    def validate_storage_type(cls, v):
        """Validate storage type."""
        allowed_types = {"local"}
        if v not in allowed_types:
            raise ValueError(f"STORAGE_TYPE must be one of {allowed_types}")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Production must not run with the placeholder key or an inverted run cap."""
        if self.app_env == "production" and self.secret_key == PLACEHOLDER_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set to a secure value in production")
        if self.monte_carlo_default_runs > self.monte_carlo_max_runs:
            raise ValueError(
                "MONTE_CARLO_DEFAULT_RUNS cannot exceed MONTE_CARLO_MAX_RUNS"
            )
        return self


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Get application settings instance."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


# Global settings instance, created on first use
_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Reset global settings instance (useful for testing)."""
    global _settings
    _settings = None
