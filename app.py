import logging

import streamlit as st

from dashboard import auth
from dashboard.context import DashboardContext
from dashboard.header import render_global_header
from dashboard.logging_config import configure_logging
from dashboard.router import render_router
from dashboard.theme import inject_theme_css

logger = logging.getLogger("dashboard")


def _load_settings(session):
    cached = st.session_state.get("settings.cached")
    if cached is None or st.session_state.get("settings.user") != session.user_id:
        cached = session.get_settings()
        st.session_state["settings.cached"] = cached
        st.session_state["settings.user"] = session.user_id
    return cached


def main():
    auth.load_local_env()
    configure_logging()
    st.set_page_config(page_title="MoodLog", page_icon="📔", layout="wide")

    user_id = auth.enforce_login()
    session = auth.get_session(user_id)
    live = auth.get_live_entries(session)
    settings = _load_settings(session)
    inject_theme_css(settings.theme)

    ctx = DashboardContext(
        session=session,
        display_name=auth.get_display_name(user_id, session.get_profile()),
        live=live,
        settings=settings,
    )
    ctx.refresh()

    with st.sidebar:
        st.caption(f"Signed in as {ctx.display_name}")
        if st.button("Sign out", key="logout_sidebar"):
            auth.logout()

    render_global_header(ctx)
    render_router(ctx)


main()
