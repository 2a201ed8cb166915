"""
Structured logging utilities for event-based logging.

Events are emitted as log records carrying a ``structured_data`` dict so
they stay queryable, and rendered by a compact formatter for humans.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .context import get_correlation_id, get_operation_context


class StructuredLogger:
    """
    Structured logger that creates consistent, searchable log events.

    Injects the correlation id and any scoped logging context into every
    event it emits.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def event(
        self,
        event_name: str,
        data: Optional[Dict[str, Any]] = None,
        level: int = logging.INFO,
    ):
        """
        Log a structured event with optional data.

        Args:
            event_name: Name of the event (e.g., 'credential_stored')
            data: Dictionary of structured data to include
            level: Log level (defaults to INFO)
        """
        if not self.logger.isEnabledFor(level):
            return

        structured_data = {
            "event": event_name,
            "correlation_id": get_correlation_id(),
        }

        operation_context = get_operation_context()
        if operation_context:
            structured_data.update(operation_context)

        if data:
            structured_data.update(data)

        record = self.logger.makeRecord(
            self.logger.name, level, "(structured)", 0, event_name, (), None
        )
        record.structured_data = structured_data

        self.logger.handle(record)


# Global structured logger instance
_global_logger: Optional[StructuredLogger] = None


def get_structured_logger(name: str = "localcreds") -> StructuredLogger:
    """Get or create a structured logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name)
    return _global_logger


def log_event(
    event_name: str, data: Optional[Dict[str, Any]] = None, level: int = logging.INFO
):
    """
    Convenience function for logging structured events.

    Args:
        event_name: Name of the event
        data: Optional structured data
        level: Log level

    Example::

        log_event("credential_stored", {
            "namespace": "my-app",
            "storage_key": "session.json",
            "encrypted": True,
        })
    """
    get_structured_logger().event(event_name, data, level)


def create_development_formatter() -> logging.Formatter:
    """
    Create a human-readable formatter for development environments.

    Operation events get timing, storage events get their namespace/key
    context, anything else falls back to the event name.
    """

    class DevelopmentFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[
                :-3
            ]

            data: Optional[dict] = getattr(record, "structured_data", None)

            if not data:
                return f"{timestamp} | {record.levelname:5} | {record.getMessage()}"

            event = data.get("event", "")
            operation = data.get("operation", "")

            if event == "operation_started":
                message_content = f"🚀 {operation or 'operation'} started"
            elif event == "operation_completed":
                message_content = self._format_operation_success(data, operation)
            elif event == "operation_failed":
                message_content = self._format_operation_error(data, operation)
            else:
                message_content = self._format_storage_event(data, event)

            return f"{timestamp} | {record.levelname:5} | {message_content}"

        def _format_duration(self, duration_ms: int) -> str:
            if duration_ms >= 1000:
                return f"{duration_ms/1000:.1f}s"
            return f"{duration_ms}ms"

        def _format_operation_success(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            duration_emoji = "⚡" if duration_ms < 50 else "⏱️"
            return f"{duration_emoji} {self._format_duration(duration_ms)} {operation}"

        def _format_operation_error(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            error_type = data.get("error_type", "Error")
            error_message = data.get("error_message", "")

            duration_part = f" {self._format_duration(duration_ms)}" if duration_ms else ""

            if len(error_message) > 60:
                error_message = error_message[:57] + "..."

            return (
                f"❌{duration_part} {operation} failed ({error_type}: {error_message})"
            )

        def _format_storage_event(self, data: dict, event: str) -> str:
            if not event:
                return "📝 log_event"

            context_parts = []
            if "namespace" in data:
                context_parts.append(f"ns={data['namespace']}")
            if "storage_key" in data:
                context_parts.append(f"key={data['storage_key']}")
            if "encrypted" in data:
                context_parts.append("encrypted" if data["encrypted"] else "plaintext")
            if "base_dir" in data:
                context_parts.append(str(data["base_dir"]))
            if "error_type" in data:
                context_parts.append(str(data["error_type"]))

            if context_parts:
                return f"🔐 {event} ({', '.join(context_parts)})"
            return f"🔐 {event}"

    return DevelopmentFormatter()
