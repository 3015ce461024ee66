"""
Core module containing configuration, logging, and exceptions.
"""

from .config import (
    BaseConfig,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    config,
    get_config,
)
from .exceptions import (
    ConfigurationError,
    DatafeedException,
    InvalidRequestError,
    UnknownSymbolError,
    UnsupportedResolutionError,
    to_udf_error,
)
from .logging import JSONFormatter, SensitiveDataFilter, get_logger, setup_logging

__all__ = [
    # Configuration
    "BaseConfig",
    "DevelopmentConfig",
    "TestingConfig",
    "ProductionConfig",
    "get_config",
    "config",
    # Exceptions
    "DatafeedException",
    "UnknownSymbolError",
    "UnsupportedResolutionError",
    "InvalidRequestError",
    "ConfigurationError",
    "to_udf_error",
    # Logging
    "setup_logging",
    "get_logger",
    "JSONFormatter",
    "SensitiveDataFilter",
]
