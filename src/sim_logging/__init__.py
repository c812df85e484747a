"""Logging module with structured formatters and ride context management."""

from .context import ContextFilter, get_log_fields, log_context, log_ride_context
from .filters import DefaultCorrelationFilter
from .formatters import DevFormatter, JSONFormatter
from .setup import setup_logging

__all__ = [
    "setup_logging",
    "log_context",
    "log_ride_context",
    "get_log_fields",
    "JSONFormatter",
    "DevFormatter",
    "DefaultCorrelationFilter",
    "ContextFilter",
]
