# =============================================================================
# skysense_core/errors/handlers.py
# Error Handling Utilities for SkySense
# =============================================================================

from __future__ import annotations
import functools
import traceback
from typing import TYPE_CHECKING, Optional, Callable, TypeVar, Any

from skysense_core.logging import get_logger
from .exceptions import SkySenseError

if TYPE_CHECKING:
    from skysense_core.notifications.toasts import ToastCenter

logger = get_logger(__name__)

T = TypeVar("T")


def handle_error(
    error: Exception,
    toasts: Optional[ToastCenter] = None,
    title: Optional[str] = None,
    user_message: Optional[str] = None,
    level: str = "warning",
    log_error: bool = True,
) -> None:
    """
    Log ``error`` and, given a toast center, surface it as an advisory.

    Network and persistence errors end here: they are logged and, when a
    toast center is given, converted into a user-visible advisory instead
    of propagating.

    Args:
        error: The exception to handle
        toasts: Toast center that receives the advisory (None = log only)
        title: Advisory title (defaults to a title derived from the level)
        user_message: Custom message to show user (uses error message if None)
        level: Toast level ("info", "warning" or "error")
        log_error: Whether to log the error
    """
    code, details, recoverable = _classify(error)
    message = user_message or getattr(error, "message", None) or str(error)

    if log_error:
        logger.error(f"[{code}] {message}", extra={"details": details}, exc_info=error)

    if toasts is None:
        return

    if not recoverable:
        level = "error"
        title = title or "Critical Error"
        message = f"{message}. Please restart the app."

    toasts.push(level, title or _DEFAULT_TITLES.get(level, "Notice"), message)


def _classify(error: Exception) -> tuple:
    """(code, details, recoverable) for any exception."""
    if isinstance(error, SkySenseError):
        return error.code, error.details, error.recoverable
    return "UNKNOWN", {"traceback": "".join(traceback.format_exception(type(error), error, error.__traceback__))}, True


_DEFAULT_TITLES = {
    "info": "Notice",
    "warning": "Warning",
    "error": "Error",
}


def error_boundary(
    default_return: Any = None,
    log: bool = True,
):
    """
    Decorator to wrap best-effort functions with error handling.

    Args:
        default_return: Value to return if function fails
        log: Whether to log errors

    Usage:
        @error_boundary(default_return=False)
        def vibrate(pattern) -> bool:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., Optional[T]]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Optional[T]:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                if log:
                    logger.warning(f"Error in {func.__name__}: {e}")
                return default_return

        return wrapper

    return decorator
