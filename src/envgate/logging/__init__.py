"""Logging setup for envgate.

Provides text and JSON formatters that carry flag evaluation fields, and
configure_logging() to install them on the root logger.
"""

from envgate.logging.config import configure_logging
from envgate.logging.handlers import JSONFormatter, TextFormatter

__all__ = [
    "JSONFormatter",
    "TextFormatter",
    "configure_logging",
]
