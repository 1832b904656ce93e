"""
Configuration module for the medication inventory dashboard.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the dashboard.

    Attributes:
        INVENTORY_API_URL: Base URL of the remote inventory REST API
        APP_NAME: Display name for the application
        DEBUG: Enable debug mode (shows API docs)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level
        REQUEST_TIMEOUT: Timeout for inventory API requests in seconds
        AUTH_COOKIE_NAME: Cookie holding the bearer token
        AUTH_COOKIE_MAX_AGE_DAYS: Lifetime of the bearer token cookie
        SESSION_COOKIE_NAME: Signed cookie carrying toasts across redirects
        SESSION_SECRET_KEY: Key signing the session cookie
        LOW_STOCK_THRESHOLD: Stock level below which a medicine is flagged
        RECENT_TRANSACTIONS_LIMIT: Number of transactions on the overview
        REPORT_FIRST_YEAR: First year offered by the report selectors
        TRANSACTION_AUTHOR: Value sent as created_by for new transactions
        ENABLE_TRACING: Export OpenTelemetry traces
    """

    INVENTORY_API_URL: str = Field(
        default="http://localhost:8000/api",
        description="Base URL of the remote inventory REST API",
    )

    APP_NAME: str = Field(
        default="Medical Inventory",
        description="Display name for the application",
    )
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    HOST: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    PORT: int = Field(
        default=3000,
        ge=1,
        le=65535,
        description="Server port number",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Emit JSON structured logs instead of human-readable lines",
    )

    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=60.0,
        description="Timeout for inventory API requests in seconds",
    )

    # Session cookie
    AUTH_COOKIE_NAME: str = Field(default="authToken")
    AUTH_COOKIE_MAX_AGE_DAYS: int = Field(default=7, ge=1, le=365)
    AUTH_COOKIE_SECURE: bool = Field(default=False)
    SESSION_COOKIE_NAME: str = Field(default="medinventory_session")
    SESSION_SECRET_KEY: str = Field(
        default="change-me-in-production",
        min_length=16,
        description="Key signing the session cookie that carries flashed toasts",
    )

    # Dashboard behaviour
    LOW_STOCK_THRESHOLD: int = Field(
        default=10,
        ge=0,
        description="Medicines with stock below this value are flagged",
    )
    RECENT_TRANSACTIONS_LIMIT: int = Field(default=5, ge=1, le=100)
    REPORT_FIRST_YEAR: int = Field(default=2020, ge=1970, le=9999)
    TRANSACTION_AUTHOR: str = Field(
        default="admin",
        min_length=1,
        description="Value sent as created_by for new transactions",
    )

    ENABLE_TRACING: bool = Field(
        default=False,
        description="Export OpenTelemetry traces over OTLP",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("INVENTORY_API_URL")
    @classmethod
    def validate_url(cls, value: str) -> str:
        """
        Validate that the API URL is properly formatted.

        Args:
            value: The URL to validate

        Returns:
            The validated URL without trailing slash

        Raises:
            ValueError: If URL is invalid
        """
        if not value:
            raise ValueError("Service URL cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"Service URL must start with http:// or https://, got: {value}"
            )

        return value

    @property
    def auth_cookie_max_age(self) -> int:
        """Cookie lifetime in seconds."""
        return self.AUTH_COOKIE_MAX_AGE_DAYS * 24 * 60 * 60


# Global settings instance
settings = Settings()
