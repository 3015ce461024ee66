"""
Configuration management for the candlefeed datafeed.

Supports multiple environments (development, testing, production) with
environment-specific settings for the upstream candle provider, the candle
cache and the HTTP surface.
"""

from typing import List

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

SUPPORTED_RESOLUTION_TOKENS = ("1", "5", "15", "60", "240", "D")


class BaseConfig(BaseSettings):
    """Base configuration with common settings for all environments."""

    # Application
    APP_NAME: str = "candlefeed"
    APP_VERSION: str = "1.0.0"
    DATAFEED_VERSION: str = Field(default="0.0.1", description="Version reported by the UDF banner")
    ENVIRONMENT: str = Field(default="development", description="Environment: development, testing, production")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server
    API_HOST: str = Field(default="0.0.0.0", description="API server host")
    API_PORT: int = Field(default=8888, description="API server port")
    CORS_ORIGINS: str = Field(default="*", description="CORS allowed origins (comma-separated)")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL")
    LOG_FORMAT: str = Field(default="json", description="Log format: json or text")
    LOG_DIR: str = Field(default="logs", description="Directory for log files")
    LOG_TO_FILE: bool = Field(default=True, description="Write rotating log files under LOG_DIR")

    # Upstream candle provider (OANDA v3)
    UPSTREAM_BASE_URL: str = Field(default="https://api-fxtrade.oanda.com", description="Upstream candle API base URL")
    UPSTREAM_API_KEY: str = Field(default="", description="Bearer token for the upstream API")
    UPSTREAM_SOCKET_TIMEOUT: float = Field(default=5.0, description="Socket idle timeout in seconds")
    UPSTREAM_REQUEST_TIMEOUT: float = Field(default=20.0, description="Overall request timeout in seconds")
    UPSTREAM_MAX_RETRIES: int = Field(default=5, description="Attempts for connection-level failures")
    UPSTREAM_RETRY_BASE_DELAY: float = Field(default=0.5, description="First retry delay in seconds")
    UPSTREAM_MAX_RETRY_DELAY: float = Field(default=30.0, description="Upper bound for a retry delay in seconds")

    # Candle cache and fetch engine
    MAX_BARS_PER_CALL: int = Field(default=5000, description="Upstream maximum bars per call")
    MAX_CONCURRENT_FETCHES: int = Field(default=100, description="Simultaneous in-flight upstream calls")
    CACHE_RESET_INTERVAL_SECONDS: int = Field(default=24 * 60 * 60, description="Wholesale cache reset interval")
    PLANNER_RESOLVE_BOTH_GAPS: bool = Field(
        default=False, description="Plan prepend and append in the same request"
    )
    SUPPORTED_RESOLUTIONS: str = Field(
        default=",".join(SUPPORTED_RESOLUTION_TOKENS), description="Advertised resolutions (comma-separated)"
    )

    # News proxies
    NEWS_BASE_URL: str = Field(default="https://feeds.finance.yahoo.com", description="Headline RSS host")
    FUTURES_NEWS_BASE_URL: str = Field(default="http://www.oilprice.com", description="Futures RSS host")
    NEWS_TIMEOUT: float = Field(default=10.0, description="News proxy timeout in seconds")

    @field_validator(
        "MAX_BARS_PER_CALL",
        "MAX_CONCURRENT_FETCHES",
        "CACHE_RESET_INTERVAL_SECONDS",
        "UPSTREAM_MAX_RETRIES",
    )
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    @field_validator("SUPPORTED_RESOLUTIONS")
    @classmethod
    def _known_resolutions(cls, value: str) -> str:
        tokens = [token.strip().upper() for token in value.split(",") if token.strip()]
        unknown = [token for token in tokens if token not in SUPPORTED_RESOLUTION_TOKENS]
        if not tokens or unknown:
            raise ValueError(f"unsupported resolutions: {unknown or value!r}")
        return ",".join(tokens)

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def supported_resolutions_list(self) -> List[str]:
        """Parse advertised resolutions from comma-separated string."""
        return self.SUPPORTED_RESOLUTIONS.split(",")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


class DevelopmentConfig(BaseConfig):
    """Development environment configuration."""

    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "DEBUG"
    LOG_FORMAT: str = "text"
    UPSTREAM_BASE_URL: str = "https://api-fxpractice.oanda.com"


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    ENVIRONMENT: str = "testing"
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"
    LOG_TO_FILE: bool = False
    API_PORT: int = 8000
    UPSTREAM_BASE_URL: str = "https://upstream.test"
    UPSTREAM_RETRY_BASE_DELAY: float = 0.0
    UPSTREAM_MAX_RETRY_DELAY: float = 0.0


class ProductionConfig(BaseConfig):
    """Production environment configuration."""

    ENVIRONMENT: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


def get_config() -> BaseConfig:
    """
    Get configuration based on ENVIRONMENT variable.

    Returns:
        BaseConfig: Configuration object for the current environment

    Raises:
        ConfigurationError: If a setting fails validation
    """
    import os

    environment = os.getenv("ENVIRONMENT", "development").lower()

    config_map = {
        "development": DevelopmentConfig,
        "testing": TestingConfig,
        "production": ProductionConfig,
    }

    config_class = config_map.get(environment, DevelopmentConfig)
    try:
        return config_class()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid {environment} configuration: {e}") from e


# Global configuration instance
config = get_config()
