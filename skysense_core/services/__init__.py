# =============================================================================
# skysense_core/services/__init__.py
# Runtime Services
# =============================================================================

from .base_service import BaseService, ServiceResult
from .timers import DebounceTimer, PeriodicTask
from .hydration import ProfileHydrator
from .bootstrap import BootstrapSequencer, INIT_ERROR_MESSAGE
from .reminder_scheduler import ReminderScheduler
from .settings_sync import SettingsSyncPipeline
from .profile_service import ProfileService, local_profile_id

__all__ = [
    "BaseService",
    "ServiceResult",
    "DebounceTimer",
    "PeriodicTask",
    "ProfileHydrator",
    "BootstrapSequencer",
    "INIT_ERROR_MESSAGE",
    "ReminderScheduler",
    "SettingsSyncPipeline",
    "ProfileService",
    "local_profile_id",
]
