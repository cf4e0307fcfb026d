# =============================================================================
# skysense_core/errors/exceptions.py
# Custom Exception Hierarchy for SkySense
# =============================================================================

from typing import Optional, Dict, Any


class SkySenseError(Exception):
    """
    Base exception for all SkySense errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "SYNC_001")
        details: Additional context as a dictionary
        recoverable: Whether the app can keep running after the error
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "SKY_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# NETWORK / REMOTE SERVICE EXCEPTIONS
# =============================================================================

class ConnectivityError(SkySenseError):
    """Raised when the backend health probe times out or is rejected"""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if timeout is not None:
            details["timeout"] = timeout

        super().__init__(
            message=message,
            code="NET_001",
            details=details,
            **kwargs,
        )


class RemoteServiceError(SkySenseError):
    """Raised by profile API clients when a remote call fails"""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if operation:
            details["operation"] = operation
        if status_code is not None:
            details["status_code"] = status_code

        super().__init__(
            message=message,
            code="API_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# SYNC EXCEPTIONS
# =============================================================================

class HydrationError(SkySenseError):
    """Raised when profile or settings could not be loaded for a returning user"""

    def __init__(
        self,
        message: str,
        profile_id: Optional[str] = None,
        failed: Optional[list] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if profile_id:
            details["profile_id"] = profile_id
        if failed:
            details["failed"] = failed

        super().__init__(
            message=message,
            code="SYNC_001",
            details=details,
            **kwargs,
        )


class ProfileSaveError(SkySenseError):
    """Raised when the remote service does not accept a profile"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message=message, code="SYNC_002", **kwargs)


class SettingsSyncError(SkySenseError):
    """Raised when a debounced settings save fails"""

    def __init__(
        self,
        message: str,
        profile_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if profile_id:
            details["profile_id"] = profile_id

        super().__init__(
            message=message,
            code="SYNC_003",
            details=details,
            **kwargs,
        )


# =============================================================================
# DATA / STORAGE EXCEPTIONS
# =============================================================================

class ProfileValidationError(SkySenseError):
    """Raised when a profile or medication breaks a model invariant"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value

        super().__init__(
            message=message,
            code="DATA_001",
            details=details,
            **kwargs,
        )


class StorageError(SkySenseError):
    """Raised when the local state store cannot be read or written"""

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if key:
            details["key"] = key

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(SkySenseError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {})
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
