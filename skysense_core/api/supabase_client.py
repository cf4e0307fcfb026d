"""
Supabase Profile Client
Stores profiles and settings directly in Supabase tables

Expected tables:

    create table user_profiles (
        id uuid primary key default gen_random_uuid(),
        profile jsonb not null,
        updated_at timestamptz default now()
    );

    create table user_settings (
        profile_id text primary key,
        settings jsonb not null,
        updated_at timestamptz default now()
    );
"""
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from supabase import Client, create_client

from skysense_core.errors import ConfigurationError, RemoteServiceError
from skysense_core.logging import get_logger
from skysense_core.state.models import AppSettings, UserProfile
from .base_client import APIConfig, ProfileAPI, SaveProfileResponse

logger = get_logger(__name__)


class SupabaseProfileAPI(ProfileAPI):
    """Profile API backed by the supabase-py client"""

    PROFILES_TABLE = "user_profiles"
    SETTINGS_TABLE = "user_settings"

    def __init__(self, config: APIConfig, client: Optional[Client] = None):
        super().__init__(config)
        if client is None:
            if not config.base_url or not config.api_key:
                raise ConfigurationError(
                    "Supabase URL and key are required",
                    config_key="supabase_url",
                )
            client = create_client(config.base_url, config.api_key)
        self.client = client

    def _execute(self, operation: str, query):
        try:
            return query.execute()
        except Exception as e:
            raise RemoteServiceError(
                f"Supabase operation failed: {e}",
                operation=operation,
            ) from e

    def health_check(self) -> bool:
        self._execute(
            "health_check",
            self.client.table(self.PROFILES_TABLE).select("id").limit(1),
        )
        return True

    def get_profile(self, profile_id: str) -> Optional[UserProfile]:
        response = self._execute(
            "get_profile",
            self.client.table(self.PROFILES_TABLE).select("profile").eq("id", profile_id).limit(1),
        )
        if not response.data:
            return None
        return UserProfile.from_dict(response.data[0].get("profile") or {})

    def save_profile(self, profile: UserProfile) -> SaveProfileResponse:
        response = self._execute(
            "save_profile",
            self.client.table(self.PROFILES_TABLE).insert({
                "profile": profile.to_dict(),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }),
        )
        if not response.data:
            return SaveProfileResponse(success=False)

        profile_id = str(response.data[0]["id"])
        logger.info(f"Profile stored in Supabase: {profile_id}")
        return SaveProfileResponse(success=True, profile_id=profile_id)

    def get_user_settings(self, profile_id: str) -> Optional[Dict[str, Any]]:
        response = self._execute(
            "get_user_settings",
            self.client.table(self.SETTINGS_TABLE).select("settings").eq("profile_id", profile_id).limit(1),
        )
        if not response.data:
            return None
        return response.data[0].get("settings")

    def save_settings(self, profile_id: str, settings: AppSettings) -> None:
        self._execute(
            "save_settings",
            self.client.table(self.SETTINGS_TABLE).upsert(
                {
                    "profile_id": profile_id,
                    "settings": settings.to_dict(),
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                },
                on_conflict="profile_id",
            ),
        )
