"""
Mock Profile Client
In-memory backend for demos, offline development and tests
"""
import threading
import time
import uuid
from typing import Optional, Dict, Any, List, Set, Tuple

from skysense_core.errors import RemoteServiceError
from skysense_core.state.models import AppSettings, UserProfile
from .base_client import APIConfig, ProfileAPI, SaveProfileResponse


class MockProfileAPI(ProfileAPI):
    """
    Mock connector that keeps profiles and settings in dictionaries.

    Args:
        config: API configuration (only api_name is used)
        healthy: Whether health_check succeeds
        fail_operations: Operation names that raise RemoteServiceError
        latency: Seconds every call blocks for
        health_latency: Seconds health_check blocks for (overrides latency)
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        healthy: bool = True,
        fail_operations: Optional[Set[str]] = None,
        latency: float = 0.0,
        health_latency: Optional[float] = None,
    ):
        super().__init__(config or APIConfig(api_name="profile_mock"))
        self.healthy = healthy
        self.fail_operations = set(fail_operations or ())
        self.latency = latency
        self.health_latency = health_latency
        self.profiles: Dict[str, Dict[str, Any]] = {}
        self.settings: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def _record(self, operation: str, argument: Any = None, latency: Optional[float] = None) -> None:
        with self._lock:
            self.calls.append((operation, argument))

        delay = self.latency if latency is None else latency
        if delay:
            time.sleep(delay)

        if operation in self.fail_operations:
            raise RemoteServiceError(f"Mock failure for {operation}", operation=operation)

    def calls_to(self, operation: str) -> List[Any]:
        with self._lock:
            return [arg for op, arg in self.calls if op == operation]

    def health_check(self) -> bool:
        self._record("health_check", latency=self.health_latency)
        if not self.healthy:
            raise RemoteServiceError("Mock backend is down", operation="health_check")
        return True

    def get_profile(self, profile_id: str) -> Optional[UserProfile]:
        self._record("get_profile", profile_id)
        payload = self.profiles.get(profile_id)
        return UserProfile.from_dict(payload) if payload is not None else None

    def save_profile(self, profile: UserProfile) -> SaveProfileResponse:
        self._record("save_profile", profile)
        profile_id = uuid.uuid4().hex
        self.profiles[profile_id] = profile.to_dict()
        return SaveProfileResponse(success=True, profile_id=profile_id)

    def get_user_settings(self, profile_id: str) -> Optional[Dict[str, Any]]:
        self._record("get_user_settings", profile_id)
        payload = self.settings.get(profile_id)
        return dict(payload) if payload is not None else None

    def save_settings(self, profile_id: str, settings: AppSettings) -> None:
        self._record("save_settings", (profile_id, settings))
        self.settings[profile_id] = settings.to_dict()
