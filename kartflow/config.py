"""
Configuration module for the KartFlow console.

Every value comes from the environment (or a .env file) and is validated on
startup, so a bad backend URL or session key stops the console before it
serves a page.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the admin console.

    Attributes:
        API_BASE_URL: Base URL for the e-commerce REST backend
        APP_NAME: Display name for the application
        DEBUG: Enable debug mode (shows API docs, disables tracing)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        REQUEST_TIMEOUT: Default timeout for backend HTTP requests in seconds
        SESSION_SECRET_KEY: Key used to sign session tokens
        SESSION_COOKIE_NAME: Name of the session cookie
        SESSION_TTL_MINUTES: Lifetime of a signed-in session
        SESSION_STORE_MAX_SIZE: Maximum number of live sessions kept in memory
        DASHBOARD_LIVE_STATS: Fetch dashboard stats from the backend instead of sample data
    """

    # Backend
    API_BASE_URL: str = Field(
        default="http://localhost:8000/api",
        description="Base URL for the e-commerce REST backend",
    )

    # Application configuration
    APP_NAME: str = Field(
        default="KartFlow",
        description="Display name for the application",
    )
    DEBUG: bool = Field(
        default=True,
        description="Enable debug mode",
    )

    # Server configuration
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

    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=30.0,
        description="Default timeout for backend HTTP requests in seconds",
    )

    # Session configuration
    SESSION_SECRET_KEY: str = Field(
        default="kartflow-dev-secret-change-me",
        min_length=16,
        description="Key used to sign session tokens",
    )
    SESSION_ALGORITHM: str = Field(
        default="HS256",
        description="JWT algorithm for session tokens",
    )
    SESSION_COOKIE_NAME: str = Field(
        default="kartflow_session",
        description="Name of the session cookie",
    )
    SESSION_TTL_MINUTES: int = Field(
        default=480,
        ge=1,
        le=10080,
        description="Lifetime of a signed-in session in minutes",
    )
    SESSION_STORE_MAX_SIZE: int = Field(
        default=10000,
        ge=1,
        description="Maximum number of live sessions kept in memory",
    )

    DASHBOARD_LIVE_STATS: bool = Field(
        default=False,
        description="Fetch dashboard stats from the backend instead of sample data",
    )

    SLOW_REQUEST_THRESHOLD_MS: float = Field(
        default=1000.0,
        gt=0,
        description="Requests slower than this are logged as warnings",
    )

    # Tracing
    ENABLE_TRACING: bool = Field(
        default=False,
        description="Export OpenTelemetry traces",
    )
    OTLP_ENDPOINT: str = Field(
        default="localhost:4317",
        description="OTLP gRPC collector endpoint",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("API_BASE_URL")
    @classmethod
    def normalize_api_base_url(cls, value: str) -> str:
        """Require an http(s) backend URL; endpoint paths are joined without a trailing slash."""
        url = value.strip().rstrip("/")
        if not url:
            raise ValueError("API_BASE_URL is required")
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"API_BASE_URL must be an http(s) URL, got: {url}")
        return url


settings = Settings()
