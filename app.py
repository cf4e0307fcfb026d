from __future__ import annotations
import uuid

import streamlit as st

from skysense_core.runtime import BackgroundRuntime, build_app
from skysense_core.state import AppScreen, AppState, Medication
from skysense_core.storage import ReminderOccurrence
from skysense_core.ui import (
    SCREENS,
    RecoveryView,
    loading_message,
    render_current_screen,
    voice_assistant_visible,
)

# ============================================================================
# PAGE CONFIGURATION
# ============================================================================
st.set_page_config(
    page_title="SkySense",
    page_icon="🌤️",
    layout="centered",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_runtime() -> BackgroundRuntime:
    """One runtime per server process; survives Streamlit reruns."""
    runtime = BackgroundRuntime(build_app())
    runtime.start().result(timeout=30)
    return runtime


runtime = get_runtime()
app = runtime.app
state = app.state

# ============================================================================
# TOASTS
# ============================================================================
_ICONS = {"info": "ℹ️", "success": "✅", "warning": "⚠️", "error": "❌"}

# Shown on a session's first run; older toasts stay in history only
_FIRST_VISIT_TOASTS = 5

_unseen = app.toasts.since(st.session_state.get("last_toast_id", 0))
if "last_toast_id" not in st.session_state:
    _unseen = _unseen[-_FIRST_VISIT_TOASTS:]
for toast in _unseen:
    st.toast(f"**{toast.title}**  \n{toast.description}", icon=_ICONS[toast.level])
if _unseen:
    st.session_state["last_toast_id"] = _unseen[-1].id
else:
    st.session_state.setdefault("last_toast_id", 0)


def _run_toast_action(toast_id: int) -> None:
    runtime.call(app.trigger_toast_action, toast_id)


# ============================================================================
# STARTUP PLACEHOLDER
# ============================================================================
message = loading_message(state)
if message:
    st.title("SkySense")
    st.info(message)
    if state.error:
        st.error(state.error)
    st.stop()

# ============================================================================
# SIDEBAR NAVIGATION
# ============================================================================
with st.sidebar:
    st.markdown("### 🌤️ SkySense")
    for entry in SCREENS:
        if st.button(f"{entry['icon']} {entry['name']}", key=f"nav_{entry['screen'].value}", use_container_width=True):
            runtime.call(app.navigate, entry["screen"])
            st.rerun()

    st.markdown("---")
    dark_label = "☀️ Light mode" if state.is_dark_mode else "🌙 Dark mode"
    if st.button(dark_label, key="toggle_dark_mode", use_container_width=True):
        runtime.call(app.toggle_dark_mode)
        st.rerun()

    status = app.connection.get_status_display()
    st.caption(f"Backend: {'🟢 online' if status['is_online'] else '🔴 offline'}")


# ============================================================================
# SCREENS
# ============================================================================
def _pending_reminders() -> None:
    for toast in app.toasts.open_actions():
        col_title, col_btn = st.columns([3, 1])
        col_title.markdown(toast.title)
        if col_btn.button(toast.action.label, key=f"toast_action_{toast.id}"):
            _run_toast_action(toast.id)
            st.rerun()


def render_splash(s: AppState) -> None:
    st.title("🌤️ SkySense")
    st.caption("Your personal environmental-health companion")
    if st.button("Get Started", type="primary"):
        runtime.call(app.navigate, AppScreen.ONBOARDING)
        st.rerun()


def render_onboarding(s: AppState) -> None:
    st.header("Welcome")
    st.write("SkySense tracks air quality, pollen and UV and reminds you about your medications.")
    if st.button("Set up my health profile", type="primary"):
        runtime.call(app.navigate, AppScreen.HEALTH_PROFILE)
        st.rerun()


def render_health_profile(s: AppState) -> None:
    st.header("Health Profile")
    profile = s.user_profile
    with st.form("health_profile"):
        has_asthma = st.checkbox("Asthma", value=profile.has_asthma)
        has_dust = st.checkbox("Dust allergy", value=profile.has_dust_allergy)
        has_pollen = st.checkbox("Pollen allergy", value=profile.has_pollen_allergy)
        has_heart = st.checkbox("Heart condition", value=profile.has_heart_condition)
        has_uv = st.checkbox("UV sensitivity", value=profile.has_uv_sensitivity)
        st.markdown("**Add a medication**")
        med_name = st.text_input("Name")
        med_dosage = st.text_input("Dosage")
        med_condition = st.text_input("Condition")
        med_time = st.time_input("Reminder time", value=None)
        submitted = st.form_submit_button("Save profile", type="primary")

    if submitted:
        medications = profile.medications
        if med_name and med_time is not None:
            medications += (Medication(
                id=uuid.uuid4().hex[:12],
                name=med_name,
                dosage=med_dosage,
                frequency="daily",
                condition=med_condition,
                times=(med_time.strftime("%H:%M"),),
            ),)
        updated = profile.merge({
            "has_asthma": has_asthma,
            "has_dust_allergy": has_dust,
            "has_pollen_allergy": has_pollen,
            "has_heart_condition": has_heart,
            "has_uv_sensitivity": has_uv,
            "medications": medications,
        })
        runtime.submit(app.save_profile(updated)).result(timeout=60)
        st.rerun()


def render_home(s: AppState) -> None:
    st.header("🏠 Home")
    _pending_reminders()
    meds = s.user_profile.active_medications
    if not meds:
        st.info("No medications configured.")
    for med in meds:
        st.markdown(f"💊 **{med.name}** {med.dosage} at {', '.join(med.times)}")
        for hhmm in med.times:
            if st.button(f"Mark {hhmm} taken", key=f"taken_{med.id}_{hhmm}"):
                occurrence = ReminderOccurrence(med.id, runtime.app.scheduler.clock().date(), hhmm)
                runtime.call(app.mark_taken, occurrence)
                st.rerun()
    if st.button("Edit health profile"):
        runtime.call(app.navigate, AppScreen.HEALTH_PROFILE)
        st.rerun()


_SETTINGS_LABELS = {
    "voice_assistant": "Voice assistant",
    "push_notifications": "Push notifications",
    "weather_alerts": "Weather alerts",
    "air_quality_alerts": "Air quality alerts",
    "health_reminders": "Health reminders",
    "medication_reminders": "Medication reminders",
    "community_updates": "Community updates",
    "location_sharing": "Location sharing",
    "auto_refresh": "Auto refresh",
}


def render_settings(s: AppState) -> None:
    st.header("⚙️ Settings")
    for name, label in _SETTINGS_LABELS.items():
        current = getattr(s.app_settings, name)
        value = st.toggle(label, value=current, key=f"setting_{name}")
        if value != current:
            runtime.call(app.update_settings, **{name: value})
            st.rerun()


def _placeholder(title: str):
    def render(s: AppState) -> None:
        st.header(title)
        st.caption("Content for this screen is provided by the SkySense services.")
    return render


RENDERERS = {
    AppScreen.SPLASH: render_splash,
    AppScreen.ONBOARDING: render_onboarding,
    AppScreen.HEALTH_PROFILE: render_health_profile,
    AppScreen.HOME: render_home,
    AppScreen.SETTINGS: render_settings,
}
for entry in SCREENS:
    RENDERERS.setdefault(entry["screen"], _placeholder(f"{entry['icon']} {entry['name']}"))

result = render_current_screen(state, RENDERERS)
if isinstance(result, RecoveryView):
    st.error(result.title)
    st.write(result.message)
    if st.button(result.action_label):
        st.rerun()

if voice_assistant_visible(state):
    st.caption("🎙️ Voice assistant available")
