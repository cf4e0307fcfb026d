"""
Edge Function Profile Client
Talks to the SkySense backend routes deployed as Supabase edge functions
"""
from typing import Optional, Dict, Any

import requests

from skysense_core.errors import RemoteServiceError
from skysense_core.state.models import AppSettings, UserProfile
from .base_client import APIConfig, ProfileAPI, SaveProfileResponse


class EdgeFunctionProfileAPI(ProfileAPI):
    """
    HTTP client for the profile backend.

    Routes (relative to base_url):
        GET  health              -> {"status": "ok"}
        GET  profile/{id}        -> {"profile": {...}}
        POST profile             -> {"success": true, "profileId": "..."}
        GET  settings/{id}       -> {"settings": {...}}
        POST settings/{id}       -> {"success": true}
    """

    def __init__(self, config: APIConfig):
        super().__init__(config)
        self.session = requests.Session()

        if config.headers:
            self.session.headers.update(config.headers)

        if config.api_key:
            self._set_auth_header()

    def _set_auth_header(self):
        """Supabase edge functions accept the anon key as a bearer token"""
        self.session.headers.update({
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        })

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict] = None
    ) -> Dict[str, Any]:
        """
        Make HTTP request with error handling

        Args:
            endpoint: API endpoint (appended to base_url)
            method: HTTP method (GET, POST)
            data: Request body data

        Returns:
            Decoded JSON body (empty dict for an empty body)
        """
        url = f"{self.config.base_url.rstrip('/')}/{endpoint}"

        try:
            response = self.session.request(
                method=method,
                url=url,
                json=data,
                timeout=self.config.timeout
            )
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise RemoteServiceError(
                f"{self.config.api_name} returned an error for {endpoint}",
                operation=f"{method} {endpoint}",
                status_code=e.response.status_code if e.response is not None else None,
            ) from e
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(
                f"API request failed for {self.config.api_name}: {str(e)}",
                operation=f"{method} {endpoint}",
            ) from e

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise RemoteServiceError(
                f"Invalid JSON from {self.config.api_name}",
                operation=f"{method} {endpoint}",
            ) from e

    def health_check(self) -> bool:
        self._make_request("health")
        return True

    def get_profile(self, profile_id: str) -> Optional[UserProfile]:
        body = self._make_request(f"profile/{profile_id}")
        payload = body.get("profile")
        if not payload:
            return None
        return UserProfile.from_dict(payload)

    def save_profile(self, profile: UserProfile) -> SaveProfileResponse:
        body = self._make_request("profile", method="POST", data={"profile": profile.to_dict()})
        return SaveProfileResponse(
            success=bool(body.get("success")),
            profile_id=body.get("profileId"),
            user_id=body.get("userId"),
        )

    def get_user_settings(self, profile_id: str) -> Optional[Dict[str, Any]]:
        body = self._make_request(f"settings/{profile_id}")
        return body.get("settings")

    def save_settings(self, profile_id: str, settings: AppSettings) -> None:
        self._make_request(
            f"settings/{profile_id}",
            method="POST",
            data={"settings": settings.to_dict()},
        )

    def close(self) -> None:
        self.session.close()
