"""
Configuration management for the Monnify Relay Server.

Uses pydantic-settings for environment variable loading and validation.
"""

from typing import List, Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


PLACEHOLDER_CREDENTIAL = "xxxx"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server Configuration
    server_host: str = Field(default="0.0.0.0", description="Server host address")
    port: int = Field(default=5000, description="Server port")
    base_url: str = Field(
        default="",
        description="Public URL of this server (defaults to http://localhost:<port>)"
    )
    env: str = Field(default="development", description="Environment (development/production)")

    # Monnify Configuration
    monnify_api_url: str = Field(
        default="https://sandbox.monnify.com/api/v1",
        description="Monnify API base URL"
    )
    monnify_api_key: str = Field(
        default=PLACEHOLDER_CREDENTIAL,
        description="Monnify API key"
    )
    monnify_client_secret: str = Field(
        default=PLACEHOLDER_CREDENTIAL,
        validation_alias=AliasChoices("monnify_secret_key", "monnify_client_secret"),
        description="Monnify client secret (MONNIFY_SECRET_KEY)"
    )
    provider_timeout_seconds: Optional[float] = Field(
        default=None,
        description="Timeout for provider calls in seconds (unset means no timeout)"
    )

    # Demo upstream used by GET /api
    demo_api_url: str = Field(
        default="https://httpbin.org",
        description="External API called by the demo endpoint"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log format (json or console)"
    )

    # CORS Configuration
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate server port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError("Server port must be between 1 and 65535")
        return v

    @field_validator("env")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is development or production."""
        if v not in ["development", "production"]:
            raise ValueError("Environment must be 'development' or 'production'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        v_lower = v.lower()
        if v_lower not in ["json", "console"]:
            raise ValueError("Log format must be 'json' or 'console'")
        return v_lower

    @field_validator("provider_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("Provider timeout must be positive")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == "production"

    def validate_required_production_settings(self) -> None:
        """
        Validate that required settings are configured for production.

        Raises ValueError if critical settings are missing in production.
        """
        if not self.is_production:
            return

        errors = []

        if self.monnify_api_key in ("", PLACEHOLDER_CREDENTIAL):
            errors.append("MONNIFY_API_KEY is required in production")

        if self.monnify_client_secret in ("", PLACEHOLDER_CREDENTIAL):
            errors.append("MONNIFY_SECRET_KEY is required in production")

        if errors:
            raise ValueError(
                "Production configuration errors:\n" + "\n".join(f"  - {err}" for err in errors)
            )

    def model_post_init(self, __context) -> None:
        """Derive defaults and validate configuration after initialization."""
        if not self.base_url:
            self.base_url = f"http://localhost:{self.port}"

        if self.is_production:
            self.validate_required_production_settings()


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """
    Get the global settings instance.

    This function can be used as a FastAPI dependency.
    """
    return settings


# Export for convenience
__all__ = ["Settings", "settings", "get_settings"]
