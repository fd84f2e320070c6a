import streamlit as st

from dashboard.constants import PRIVACY_LEVELS, THEMES
from dashboard.data.models import UserSettings


def render_settings_tab(ctx):
    st.markdown("<div class='section-title'>Settings</div>", unsafe_allow_html=True)
    current = ctx.settings

    with st.form("settings.form"):
        theme = st.radio(
            "Theme",
            THEMES,
            index=THEMES.index(current.theme),
            format_func=str.title,
            horizontal=True,
        )
        notifications = st.toggle("Daily reminder notifications", value=current.notifications)
        privacy = st.radio(
            "Journal privacy",
            PRIVACY_LEVELS,
            index=PRIVACY_LEVELS.index(current.privacy),
            format_func=str.title,
            horizontal=True,
        )
        submitted = st.form_submit_button("Save settings")

    if not submitted:
        return
    updated = UserSettings(theme=theme, notifications=notifications, privacy=privacy)
    if ctx.session.save_settings(updated):
        st.session_state["settings.cached"] = updated
        st.success("Settings saved.")
        st.rerun()
    else:
        st.error("Could not save your settings.")
