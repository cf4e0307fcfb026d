# =============================================================================
# skysense_core/services/base_service.py
# Shared Result Type and Service Base
# =============================================================================

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from skysense_core.errors import SkySenseError
from skysense_core.logging import LogContext, get_logger


@dataclass
class ServiceResult:
    """
    Outcome of a service call that reports failure instead of raising.

    ``data`` may be set on failures too: a profile saved only on the device
    still carries its local id.
    """
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, data: Any = None, metadata: Optional[Dict[str, Any]] = None) -> ServiceResult:
        return cls(True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        error_code: str = "UNKNOWN",
        data: Any = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        return cls(False, data=data, error=error, error_code=error_code, metadata=metadata)

    @classmethod
    def from_exception(cls, e: Exception, data: Any = None) -> ServiceResult:
        """SkySense errors keep their code and details; anything else is EXCEPTION."""
        if isinstance(e, SkySenseError):
            return cls.fail(e.message, e.code, data=data, metadata=e.details)
        return cls.fail(str(e), "EXCEPTION", data=data)


class BaseService:
    """
    Base for the runtime components.

    Each subclass logs under ``skysense_core.services.<ClassName>`` so the
    level set by ``setup_logging`` applies to all of them.
    """

    def __init__(self):
        self.logger = get_logger(f"skysense_core.services.{type(self).__name__}")

    def log_operation(self, operation: str) -> LogContext:
        """Time ``operation`` and log its start and end."""
        return LogContext(self.logger, operation)
