"""Shared utilities for markup building.

This module provides the configuration object, error taxonomy and logging
helpers used by the element engine, the command-line tool and the profiler.
"""

from .config import (
    DEFAULT_CONFIG,
    ConfigError,
    ConfigValidationError,
    RenderConfig,
)
from .errors import (
    InvalidArgumentError,
    MarkupError,
    SinkWriteError,
)
from .logging import (
    CorrelationLogger,
    configure_logging,
    get_logger,
)

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigError",
    "ConfigValidationError",
    "RenderConfig",
    "InvalidArgumentError",
    "MarkupError",
    "SinkWriteError",
    "CorrelationLogger",
    "configure_logging",
    "get_logger",
]
