"""
Operation tracking - a single decorator for timing and outcome logging.

``track`` wraps sync or async callables, emits ``operation_started``,
``operation_completed`` and ``operation_failed`` events, and records only
sanitized arguments. Secret-bearing arguments are always redacted.
"""

import functools
import inspect
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from .context import get_correlation_id
from .structured import log_event

F = TypeVar("F", bound=Callable[..., Any])


class LogConfig:
    """Global configuration for operation tracking."""

    SAMPLE_RATES = {
        "high_frequency": 0.1,
        "medium_frequency": 0.5,
        "low_frequency": 1.0,
    }

    # Matched as substrings of the argument name
    SENSITIVE_KEYS = {
        "password",
        "token",
        "secret",
        "encryption_key",
        "api_key",
        "auth",
        "credential",
    }
    MAX_ARG_LENGTH = 100

    # Mutations are always logged regardless of sampling
    CRITICAL_OPS = {"store", "remove", "delete", "initialize"}


def track(
    operation: Optional[str] = None,
    level: int = logging.INFO,
    frequency: str = "low_frequency",
    include_args: Union[bool, List[str]] = True,
    include_result: bool = True,
    track_performance: bool = True,
    emit_events: bool = True,
):
    """
    Decorator that logs the lifecycle of an operation.

    Args:
        operation: Operation name (derived from the function if None)
        level: Log level for this operation
        frequency: Sampling category (high_frequency, medium_frequency, low_frequency)
        include_args: True for all args, List[str] for specific args, False for none
        include_result: Whether to log return value info
        track_performance: Whether to track timing metrics
        emit_events: Whether to emit log events (False for silent mode)

    Examples:
        @track()
        @track(operation="credential_get", include_args=["key"])
    """

    def decorator(func: F) -> F:
        op_name = operation or _get_operation_name(func)
        signature = inspect.signature(func)

        def _tracker(args: tuple, kwargs: dict) -> "BaseOperationTracker":
            return BaseOperationTracker(
                operation=op_name,
                level=level,
                include_args=include_args,
                include_result=include_result,
                track_performance=track_performance,
                emit_events=emit_events,
                arguments=_bind_arguments(signature, args, kwargs),
            )

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            if not _should_log(op_name, frequency):
                return await func(*args, **kwargs)

            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = await func(*args, **kwargs)
                tracker.set_result(result)
                tracker.on_exit(None, None)
                return result
            except Exception as e:
                tracker.on_exit(type(e), e)
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            if not _should_log(op_name, frequency):
                return func(*args, **kwargs)

            tracker = _tracker(args, kwargs)
            tracker.on_enter()
            try:
                result = func(*args, **kwargs)
                tracker.set_result(result)
                tracker.on_exit(None, None)
                return result
            except Exception as e:
                tracker.on_exit(type(e), e)
                raise

        if inspect.iscoroutinefunction(func):
            return cast(F, async_wrapper)
        return cast(F, sync_wrapper)

    return decorator


class BaseOperationTracker:
    """Tracker that handles all logging for one operation invocation."""

    def __init__(
        self,
        operation: str,
        level: int,
        include_args: Union[bool, List[str]],
        include_result: bool,
        track_performance: bool,
        emit_events: bool,
        arguments: Dict[str, Any],
    ):
        self.operation = operation
        self.level = level
        self.include_args = include_args
        self.include_result = include_result
        self.track_performance = track_performance
        self.emit_events = emit_events
        self.arguments = arguments

        self.start_time: Optional[float] = None
        self.correlation_id: Optional[str] = None
        self.result: Any = None
        self.metrics: Dict[str, Any] = {}

    def on_enter(self) -> None:
        """Called when entering the tracked operation."""
        if self.track_performance:
            self.start_time = time.perf_counter()

        self.correlation_id = get_correlation_id()

        if self.emit_events and self.level <= logging.INFO:
            log_event("operation_started", self._build_start_context(), self.level)

    def on_exit(self, exc_type: Optional[type], exc_val: Optional[BaseException]) -> None:
        """Called when leaving the tracked operation."""
        if self.track_performance and self.start_time:
            self.metrics["duration_ms"] = int(
                (time.perf_counter() - self.start_time) * 1000
            )

        if self.emit_events:
            event_name = (
                "operation_completed" if exc_type is None else "operation_failed"
            )
            event_level = self.level if exc_type is None else logging.ERROR
            log_event(event_name, self._build_exit_context(exc_type, exc_val), event_level)

    def set_result(self, result: Any) -> None:
        self.result = result

    def _build_start_context(self) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }
        context.update(_extract_safe_args(self.arguments, self.include_args))
        return context

    def _build_exit_context(
        self, exc_type: Optional[type], exc_val: Optional[BaseException]
    ) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
            "success": exc_type is None,
            **self.metrics,
        }

        if self.include_result and exc_type is None:
            context.update(_extract_result_info(self.result))

        if exc_type is not None:
            context.update(
                {
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val) if exc_val else "",
                }
            )

        return context


def _get_operation_name(func: Callable) -> str:
    """Extract operation name from function."""
    if hasattr(func, "__qualname__"):
        return func.__qualname__.replace(".", "_").lower()
    return func.__name__.lower()


def _should_log(operation: str, frequency: str) -> bool:
    """Determine if operation should be logged based on sampling."""
    if any(critical in operation.lower() for critical in LogConfig.CRITICAL_OPS):
        return True

    return random.random() < LogConfig.SAMPLE_RATES.get(frequency, 1.0)


def _bind_arguments(
    signature: inspect.Signature, args: tuple, kwargs: dict
) -> Dict[str, Any]:
    """Map positional and keyword arguments onto parameter names."""
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        # The call itself will raise; log what was passed by keyword
        return dict(kwargs)
    arguments = dict(bound.arguments)
    arguments.pop("self", None)
    arguments.pop("cls", None)
    return arguments


def _extract_safe_args(
    arguments: Dict[str, Any], include_names: Union[bool, List[str]]
) -> Dict[str, Any]:
    """Extract sanitized arguments for logging."""
    if include_names is True:
        include_keys = set(arguments.keys())
    elif isinstance(include_names, list):
        include_keys = set(include_names)
    else:
        return {}

    return {
        f"arg_{name}": _sanitize_value(name, value)
        for name, value in arguments.items()
        if name in include_keys
    }


def _sanitize_value(key: str, value: Any) -> Any:
    """Sanitize a single value for logging."""
    if any(sensitive in key.lower() for sensitive in LogConfig.SENSITIVE_KEYS):
        return "[REDACTED]"

    if isinstance(value, (str, int, float, bool, type(None))):
        if isinstance(value, str) and len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"{value[:LogConfig.MAX_ARG_LENGTH]}..."
        return value
    return f"<{type(value).__name__}>"


def _extract_result_info(result: Any) -> Dict[str, Any]:
    """Extract non-sensitive information about the result."""
    result_info: Dict[str, Any] = {"result_type": type(result).__name__}

    if isinstance(result, bool):
        result_info["result_value"] = result
    return result_info
