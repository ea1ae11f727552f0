"""Searchable select field engine."""

from searchselect.async_runner import run_async
from searchselect.exceptions import (
    AsyncExecutionError,
    ConfigurationError,
    LabelResolutionError,
    OptionFormError,
    PackageError,
    SearchFailedError,
    SettingsError,
    TransportError,
    UnsupportedOperationError,
    ValidationFailedError,
)
from searchselect.logging import configure_logging, get_logger
from searchselect.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("searchselect")

__all__ = [
    "AsyncExecutionError",
    "ConfigurationError",
    "LabelResolutionError",
    "OptionFormError",
    "PackageError",
    "SearchFailedError",
    "Settings",
    "SettingsError",
    "TransportError",
    "UnsupportedOperationError",
    "ValidationFailedError",
    "__version__",
    "configure_logging",
    "get_logger",
    "logger",
    "run_async",
]
