# Area: Shared
"""
Shared utilities used by the engine and the registry.

This package contains:
- Logging configuration
- Clock formatting helpers
"""

from .logging_config import setup_logging, log_engine_error
from .time_format import format_clock

__all__ = [
    "setup_logging",
    "log_engine_error",
    "format_clock",
]
