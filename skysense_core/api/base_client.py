"""
Base Profile API Client
Abstract contract of the remote profile service the runtime consumes
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any

from skysense_core.state.models import AppSettings, UserProfile


@dataclass
class APIConfig:
    """Configuration for API connection"""
    api_name: str
    base_url: str = ""
    api_key: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    timeout: float = 30.0
    additional_params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class SaveProfileResponse:
    """Result of saving a profile; the identifier is server-assigned."""
    success: bool
    profile_id: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def identifier(self) -> Optional[str]:
        return self.profile_id or self.user_id


class ProfileAPI(ABC):
    """
    Remote profile store.

    Calls are blocking; the runtime runs them off the event loop.
    Implementations raise RemoteServiceError on transport or server errors.
    """

    def __init__(self, config: APIConfig):
        self.config = config

    @abstractmethod
    def health_check(self) -> bool:
        """Liveness probe, no payload"""

    @abstractmethod
    def get_profile(self, profile_id: str) -> Optional[UserProfile]:
        """Load a profile; None when the service has none for the id"""

    @abstractmethod
    def save_profile(self, profile: UserProfile) -> SaveProfileResponse:
        """Store a profile and return its identifier"""

    @abstractmethod
    def get_user_settings(self, profile_id: str) -> Optional[Dict[str, Any]]:
        """
        Load settings as the raw camelCase payload.

        Partial payloads are allowed; missing keys are merged over local
        settings by the caller.
        """

    @abstractmethod
    def save_settings(self, profile_id: str, settings: AppSettings) -> None:
        """Store the full settings snapshot (not retried by this call)"""

    def close(self) -> None:
        """Release network resources"""
