"""
API Configuration Manager
Centralized creation of the profile API client from AppConfig
"""
from typing import Dict, Optional, Type

from skysense_core.config import AppConfig
from .base_client import APIConfig, ProfileAPI
from .edge_function_client import EdgeFunctionProfileAPI
from .mock_client import MockProfileAPI
from .supabase_client import SupabaseProfileAPI


class ProfileAPIConfigManager:
    """
    Creates profile API clients.

    Usage:
        manager = ProfileAPIConfigManager(AppConfig.from_env())
        api = manager.get_client()            # configured provider
        api = manager.get_client("mock")      # explicit provider
    """

    # Registry of available clients
    PROVIDERS: Dict[str, Type[ProfileAPI]] = {
        "mock": MockProfileAPI,
        "edge_function": EdgeFunctionProfileAPI,
        "supabase": SupabaseProfileAPI,
    }

    def __init__(self, config: AppConfig):
        self.config = config

    def get_client(self, provider: Optional[str] = None) -> ProfileAPI:
        """
        Get a profile API client

        Args:
            provider: Client type ('mock', 'edge_function', 'supabase');
                defaults to the configured provider

        Returns:
            Configured client instance
        """
        provider = provider or self.config.api_provider
        client_class = self.PROVIDERS.get(provider)
        if not client_class:
            raise ValueError(f"Unknown profile API provider: {provider}")

        return client_class(self._build_config(provider))

    def _build_config(self, provider: str) -> APIConfig:
        """Build APIConfig for a provider"""
        if provider == "supabase":
            base_url = self.config.supabase_url or ""
            api_key = self.config.supabase_key
        else:
            base_url = self.config.api_base_url
            api_key = self.config.api_key

        return APIConfig(
            api_name=f"profile_{provider}",
            base_url=base_url,
            api_key=api_key,
            timeout=self.config.api_timeout,
        )

    def get_available_providers(self) -> list:
        return list(self.PROVIDERS.keys())
