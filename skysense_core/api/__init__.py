"""
Remote profile service clients
"""
from .base_client import APIConfig, ProfileAPI, SaveProfileResponse
from .config_manager import ProfileAPIConfigManager
from .edge_function_client import EdgeFunctionProfileAPI
from .mock_client import MockProfileAPI
from .supabase_client import SupabaseProfileAPI

__all__ = [
    "APIConfig",
    "ProfileAPI",
    "SaveProfileResponse",
    "ProfileAPIConfigManager",
    "EdgeFunctionProfileAPI",
    "MockProfileAPI",
    "SupabaseProfileAPI",
]
