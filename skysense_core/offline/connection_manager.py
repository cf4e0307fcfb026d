# =============================================================================
# skysense_core/offline/connection_manager.py
# Backend Reachability Probe
# =============================================================================
"""
ConnectionManager - one bounded health check per startup.

The probe never raises. A slow, failing or unhealthy backend only means
the app starts in offline mode.
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from skysense_core.api.base_client import ProfileAPI
from skysense_core.errors import ConnectivityError
from skysense_core.logging import get_logger
from skysense_core.state.models import Connectivity

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    UNKNOWN = "unknown"
    CHECKING = "checking"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass
class ConnectionState:
    """Result history of the probes run so far."""
    status: ConnectionStatus = ConnectionStatus.UNKNOWN
    last_check: Optional[datetime] = None
    last_online: Optional[datetime] = None
    consecutive_failures: int = 0
    error_message: Optional[str] = None


StatusListener = Callable[[ConnectionState], None]


class ConnectionManager:
    """
    Races ``api.health_check`` against ``timeout`` seconds.

    Usage:
        manager = ConnectionManager(api, timeout=config.probe_timeout)
        if await manager.probe() is Connectivity.UNREACHABLE:
            toasts.info("Running in offline mode", ...)
    """

    def __init__(self, api: ProfileAPI, timeout: float = 5.0):
        self.api = api
        self.timeout = timeout
        self._state = ConnectionState()
        self._listeners: List[StatusListener] = []

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def is_online(self) -> bool:
        return self._state.status is ConnectionStatus.ONLINE

    def register_callback(self, callback: StatusListener) -> None:
        """Call ``callback(state)`` whenever a probe changes the status."""
        if callback not in self._listeners:
            self._listeners.append(callback)

    async def probe(self) -> Connectivity:
        previous = self._state.status
        self._state.status = ConnectionStatus.CHECKING
        self._state.last_check = datetime.now()

        try:
            await self._check_backend()
        except ConnectivityError as e:
            self._record_failure(e)
        else:
            self._record_success()

        if self._state.status is not previous:
            logger.info(f"Backend status {previous.value} -> {self._state.status.value}")
            self._emit()

        return Connectivity.REACHABLE if self.is_online else Connectivity.UNREACHABLE

    async def _check_backend(self) -> None:
        check = asyncio.to_thread(self.api.health_check)
        try:
            healthy = await asyncio.wait_for(check, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ConnectivityError("Backend timeout", timeout=self.timeout) from e
        except Exception as e:
            raise ConnectivityError(f"Health check rejected: {e}") from e

        if healthy is False:
            raise ConnectivityError("Health check reported unhealthy backend")

    def _record_success(self) -> None:
        self._state.status = ConnectionStatus.ONLINE
        self._state.last_online = self._state.last_check
        self._state.consecutive_failures = 0
        self._state.error_message = None

    def _record_failure(self, error: ConnectivityError) -> None:
        self._state.status = ConnectionStatus.OFFLINE
        self._state.consecutive_failures += 1
        self._state.error_message = error.message
        logger.warning(f"Backend unreachable, continuing offline: {error.message}")

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"Connection listener failed: {e}")

    def get_status_display(self) -> dict:
        """Plain dict for the sidebar status line."""
        s = self._state
        return {
            "status": s.status.value,
            "is_online": self.is_online,
            "failures": s.consecutive_failures,
            "error": s.error_message,
            "last_check": s.last_check.isoformat() if s.last_check else None,
            "last_online": s.last_online.isoformat() if s.last_online else None,
        }
