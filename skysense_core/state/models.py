# =============================================================================
# skysense_core/state/models.py
# Domain Models: Profile, Medications, Settings, Bootstrap Outcome
# =============================================================================

from __future__ import annotations
import re
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from skysense_core.errors import ProfileValidationError

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# camelCase wire names that are not a plain conversion of the field name
_PROFILE_WIRE_NAMES = {"has_uv_sensitivity": "hasUVSensitivity"}


# =============================================================================
# MEDICATION
# =============================================================================

@dataclass(frozen=True)
class Medication:
    """A medication with its daily firing times ("HH:MM", local time)."""
    id: str
    name: str
    dosage: str = ""
    frequency: str = ""
    condition: str = ""
    times: Tuple[str, ...] = ()
    is_active: bool = True
    notes: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ProfileValidationError("Medication id must not be empty", field="id")

        times = tuple(self.times)
        for t in times:
            if not isinstance(t, str) or not TIME_PATTERN.match(t):
                raise ProfileValidationError(
                    f"Invalid reminder time for medication '{self.name}'",
                    field="times",
                    value=t,
                )
        # Times behave as a set; keep first-seen order for display
        object.__setattr__(self, "times", tuple(dict.fromkeys(times)))

    def is_due_at(self, hhmm: str) -> bool:
        return self.is_active and hhmm in self.times

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "times": list(self.times),
            "condition": self.condition,
            "isActive": self.is_active,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Medication:
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            dosage=data.get("dosage", ""),
            frequency=data.get("frequency", ""),
            condition=data.get("condition", ""),
            times=tuple(data.get("times") or ()),
            is_active=bool(data.get("isActive", True)),
            notes=data.get("notes"),
        )


# =============================================================================
# USER PROFILE
# =============================================================================

@dataclass(frozen=True)
class UserProfile:
    """Health profile owned by the running app instance."""
    has_asthma: bool = False
    has_dust_allergy: bool = False
    has_pollen_allergy: bool = False
    has_heart_condition: bool = False
    has_uv_sensitivity: bool = False
    gender: str = ""
    age_group: str = ""
    medications: Tuple[Medication, ...] = ()

    def __post_init__(self):
        meds = tuple(self.medications)
        seen = set()
        for med in meds:
            if med.id in seen:
                raise ProfileValidationError(
                    "Duplicate medication id in profile",
                    field="medications",
                    value=med.id,
                )
            seen.add(med.id)
        object.__setattr__(self, "medications", meds)

    @property
    def active_medications(self) -> Tuple[Medication, ...]:
        return tuple(m for m in self.medications if m.is_active)

    def merge(self, updates: Dict[str, Any]) -> UserProfile:
        """Return a new profile with snake_case field updates applied."""
        if "medications" in updates and updates["medications"] is None:
            updates = {**updates, "medications": ()}
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in fields(self):
            if f.name == "medications":
                continue
            data[_PROFILE_WIRE_NAMES.get(f.name, _snake_to_camel(f.name))] = getattr(self, f.name)
        data["medications"] = [m.to_dict() for m in self.medications]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> UserProfile:
        """Merge a wire payload over the blank profile; a missing medication list is empty."""
        return cls().merge(cls.partial_from_dict(data))

    @staticmethod
    def partial_from_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        updates: Dict[str, Any] = {}
        for f in fields(UserProfile):
            key = _PROFILE_WIRE_NAMES.get(f.name, _snake_to_camel(f.name))
            if key not in data:
                continue
            if f.name == "medications":
                updates["medications"] = tuple(
                    Medication.from_dict(m) for m in (data[key] or ())
                )
            else:
                updates[f.name] = data[key]
        return updates


# =============================================================================
# APP SETTINGS
# =============================================================================

@dataclass(frozen=True)
class AppSettings:
    """Flat record of boolean feature toggles."""
    dark_mode: bool = False
    voice_assistant: bool = True
    push_notifications: bool = True
    weather_alerts: bool = True
    air_quality_alerts: bool = True
    health_reminders: bool = True
    medication_reminders: bool = True
    community_updates: bool = False
    location_sharing: bool = True
    auto_refresh: bool = True

    def merge(self, updates: Dict[str, Any]) -> AppSettings:
        unknown = set(updates) - {f.name for f in fields(self)}
        if unknown:
            raise ProfileValidationError(
                "Unknown settings field",
                field="settings",
                value=sorted(unknown),
            )
        return replace(self, **{k: bool(v) for k, v in updates.items()})

    def to_dict(self) -> Dict[str, bool]:
        return {_snake_to_camel(f.name): getattr(self, f.name) for f in fields(self)}

    @staticmethod
    def partial_from_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        """Keep the known camelCase keys of a remote payload, with None meaning unset."""
        updates = {}
        for f in fields(AppSettings):
            value = data.get(_snake_to_camel(f.name))
            if value is not None:
                updates[f.name] = bool(value)
        return updates

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> AppSettings:
        return cls().merge(cls.partial_from_dict(data))


# =============================================================================
# NAVIGATION / BOOTSTRAP
# =============================================================================

class AppScreen(Enum):
    """Logical screens the presentation layer can show."""
    SPLASH = "splash"
    ONBOARDING = "onboarding"
    HEALTH_PROFILE = "healthProfile"
    HOME = "home"
    PARKS = "parks"
    ALERTS = "alerts"
    FORECAST = "forecast"
    SETTINGS = "settings"
    NOTIFICATIONS = "notifications"
    TRENDS = "trends"
    PROFILE = "profile"
    COMMUNITY = "community"
    ECO = "eco"
    BADGES = "badges"


class Connectivity(Enum):
    REACHABLE = "reachable"
    UNREACHABLE = "unreachable"


class UserKind(Enum):
    NEW = "new"
    RETURNING = "returning"


class StartupMode(Enum):
    ONLINE_SYNCED = "online_synced"
    ONLINE_DEGRADED = "online_degraded"
    OFFLINE_FIRST = "offline_first"


@dataclass(frozen=True)
class BootstrapOutcome:
    """How startup resolved. Discarded once the app reaches steady state."""
    connectivity: Connectivity = Connectivity.UNREACHABLE
    user_kind: UserKind = UserKind.NEW
    profile_loaded: bool = False
    settings_loaded: bool = False
    failed: bool = False

    @property
    def mode(self) -> StartupMode:
        if self.connectivity is Connectivity.UNREACHABLE:
            return StartupMode.OFFLINE_FIRST
        if self.user_kind is UserKind.RETURNING and not (self.profile_loaded and self.settings_loaded):
            return StartupMode.ONLINE_DEGRADED
        if self.failed:
            return StartupMode.ONLINE_DEGRADED
        return StartupMode.ONLINE_SYNCED


