# =============================================================================
# skysense_core/offline/__init__.py
# Offline-First Support
# =============================================================================

from skysense_core.offline.connection_manager import (
    ConnectionManager,
    ConnectionState,
    ConnectionStatus,
)

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "ConnectionStatus",
]
