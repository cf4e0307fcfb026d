# =============================================================================
# skysense_core/notifications/toasts.py
# In-App Transient Messages
# =============================================================================

from __future__ import annotations
import itertools
import threading
from collections import OrderedDict, deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, List, Optional

from skysense_core.logging import get_logger

logger = get_logger(__name__)

TOAST_LEVELS = ("info", "success", "warning", "error")
DEFAULT_DURATION_MS = 4000

_ids = itertools.count(1)


@dataclass(frozen=True)
class ToastAction:
    """Optional action button on a toast."""
    label: str
    callback: Callable[[], None]


@dataclass(frozen=True)
class Toast:
    level: str
    title: str
    description: str = ""
    duration_ms: int = DEFAULT_DURATION_MS
    action: Optional[ToastAction] = None
    id: int = field(default_factory=lambda: next(_ids))
    created_at: datetime = field(default_factory=datetime.now)


class ToastCenter:
    """
    Log of in-app messages.

    The core pushes toasts; each presentation session reads the ones it
    has not shown yet with ``since``. Actions are invoked through
    ``trigger_action`` so the callback runs wherever the owner of the
    center decides.
    """

    MAX_HISTORY = 200
    MAX_ACTIONABLE = 100

    def __init__(self):
        self._actionable: OrderedDict[int, Toast] = OrderedDict()
        self._history: Deque[Toast] = deque(maxlen=self.MAX_HISTORY)
        self._callbacks: List[Callable[[Toast], None]] = []
        self._lock = threading.Lock()

    def push(
        self,
        level: str,
        title: str,
        description: str = "",
        duration_ms: int = DEFAULT_DURATION_MS,
        action: Optional[ToastAction] = None,
    ) -> Toast:
        if level not in TOAST_LEVELS:
            raise ValueError(f"Unknown toast level: {level}")

        toast = Toast(level, title, description, duration_ms, action)
        with self._lock:
            self._history.append(toast)
            if action is not None:
                self._actionable[toast.id] = toast
                # Oldest unanswered actions expire first
                while len(self._actionable) > self.MAX_ACTIONABLE:
                    self._actionable.popitem(last=False)

        logger.debug(f"Toast [{level}] {title}")
        for callback in list(self._callbacks):
            try:
                callback(toast)
            except Exception as e:
                logger.error(f"Error in toast callback: {e}")
        return toast

    def info(self, title: str, description: str = "", **kwargs) -> Toast:
        return self.push("info", title, description, **kwargs)

    def success(self, title: str, description: str = "", **kwargs) -> Toast:
        return self.push("success", title, description, **kwargs)

    def warning(self, title: str, description: str = "", **kwargs) -> Toast:
        return self.push("warning", title, description, **kwargs)

    def error(self, title: str, description: str = "", **kwargs) -> Toast:
        return self.push("error", title, description, **kwargs)

    def since(self, after_id: int = 0) -> List[Toast]:
        """
        Toasts pushed after ``after_id``, oldest first.

        Each reader keeps its own cursor, so several browser sessions can
        show the same toasts without taking them from one another.
        """
        with self._lock:
            return [t for t in self._history if t.id > after_id]

    def open_actions(self) -> List[Toast]:
        """Toasts whose action has not been used yet."""
        with self._lock:
            return list(self._actionable.values())

    def trigger_action(self, toast_id: int) -> bool:
        """Run a toast's action once; returns False when unknown or already used."""
        with self._lock:
            toast = self._actionable.pop(toast_id, None)
        if toast is None:
            return False
        toast.action.callback()
        return True

    @property
    def history(self) -> List[Toast]:
        with self._lock:
            return list(self._history)

    def register_callback(self, callback: Callable[[Toast], None]) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)
