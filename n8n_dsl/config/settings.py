"""
Application Settings
===================

Compiler settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from pathlib import Path
from typing import Optional, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main compiler settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="n8n DSL Compiler", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Layout Configuration
    auto_layout: bool = Field(default=True, description="Place nodes automatically")
    node_spacing: Union[int, float] = Field(
        default=200, gt=0, description="Horizontal gap between nodes"
    )
    start_x: Union[int, float] = Field(default=0, description="X coordinate of the first node")
    start_y: Union[int, float] = Field(default=0, description="Y coordinate of the first node")

    # Validation Configuration
    validation_enabled: bool = Field(
        default=True, description="Validate the AST and the generated workflow"
    )
    strict: bool = Field(default=False, description="Treat validation warnings as errors")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines outside production")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="N8N_DSL_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
