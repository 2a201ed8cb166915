"""
Logging infrastructure for localcreds.

Structured events plus a single ``track`` decorator for operation timing.
"""

from .context import get_correlation_id, logging_context, set_correlation_id
from .smart_logger import track
from .structured import StructuredLogger, log_event

__all__ = [
    "track",
    "log_event",
    "logging_context",
    "get_correlation_id",
    "set_correlation_id",
    "StructuredLogger",
]
