# =============================================================================
# skysense_core/errors/__init__.py
# Centralized Error Handling for SkySense
# =============================================================================

from .exceptions import (
    SkySenseError,
    ConnectivityError,
    RemoteServiceError,
    HydrationError,
    ProfileSaveError,
    SettingsSyncError,
    ProfileValidationError,
    StorageError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    error_boundary,
)

__all__ = [
    # Exceptions
    "SkySenseError",
    "ConnectivityError",
    "RemoteServiceError",
    "HydrationError",
    "ProfileSaveError",
    "SettingsSyncError",
    "ProfileValidationError",
    "StorageError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "error_boundary",
]
