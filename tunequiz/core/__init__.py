"""
Core module for tunequiz.

This module provides the foundational components used throughout the package:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with multiple outputs

Usage:
    from tunequiz.core import (
        Config, load_config,
        setup_logging, get_logger,
        TuneQuizError, ConfigurationError, ProviderError
    )
"""

from tunequiz.core.config import (
    CATEGORY_INFO,
    DEFAULT_CATEGORIES,
    PLACEHOLDER_COLLECTION_ID,
    CatalogConfig,
    Config,
    ProviderConfig,
    load_config,
)
from tunequiz.core.exceptions import (
    ConfigurationError,
    FetchCancelledError,
    InsufficientContentError,
    NoContentError,
    ProviderError,
    TuneQuizError,
)
from tunequiz.core.logger import (
    get_logger,
    log_provider_failure,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "ProviderConfig",
    "CatalogConfig",
    "CATEGORY_INFO",
    "DEFAULT_CATEGORIES",
    "PLACEHOLDER_COLLECTION_ID",
    "load_config",
    # Exceptions
    "TuneQuizError",
    "ConfigurationError",
    "ProviderError",
    "NoContentError",
    "InsufficientContentError",
    "FetchCancelledError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_provider_failure",
    "shutdown_logging",
]
