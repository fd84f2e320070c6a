from __future__ import annotations

import logging
import os

import streamlit as st

from dashboard.constants import DEFAULT_POLL_SECONDS
from dashboard.data.api_client import ApiClient
from dashboard.data.journal import JournalSession, LiveEntries
from dashboard.data.store import ApiStore, MemoryStore

logger = logging.getLogger(__name__)

ENV_PATH = os.path.join(os.path.dirname(__file__), "..", ".env")

ENV_FALLBACK_KEYS = {
    ("auth", "redirect_uri"): "AUTH_REDIRECT_URI",
    ("auth", "cookie_secret"): "AUTH_COOKIE_SECRET",
    ("auth", "google", "client_id"): "GOOGLE_CLIENT_ID",
    ("auth", "google", "client_secret"): "GOOGLE_CLIENT_SECRET",
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
    ("app", "poll_seconds"): "MOODLOG_POLL_SECONDS",
    ("app", "local_user"): "MOODLOG_LOCAL_USER",
}

SESSION_KEY = "journal.session"
LIVE_KEY = "journal.live"


def load_local_env():
    if not os.path.exists(ENV_PATH):
        return
    with open(ENV_PATH, "r", encoding="utf-8") as env_file:
        for raw_line in env_file:
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError):
        return default
    return current


def api_settings():
    base_url = str(get_secret(("app", "API_BASE_URL")) or "").strip()
    token = str(get_secret(("app", "BACKEND_SESSION_SECRET")) or "").strip()
    return base_url, token


def poll_seconds():
    raw = get_secret(("app", "poll_seconds"), DEFAULT_POLL_SECONDS)
    try:
        return max(0.5, float(raw))
    except (TypeError, ValueError):
        return DEFAULT_POLL_SECONDS


def local_user():
    return str(get_secret(("app", "local_user")) or "").strip()


def auth_configured():
    return bool(
        get_secret(("auth", "redirect_uri"))
        and get_secret(("auth", "cookie_secret"))
        and get_secret(("auth", "google", "client_id"))
        and get_secret(("auth", "google", "client_secret"))
    )


def _identity_user_id():
    user_id = str(getattr(st.user, "sub", "") or "").strip()
    if user_id:
        return user_id
    return str(getattr(st.user, "email", "") or "").strip().lower()


def enforce_login():
    """Return the signed-in user's id, stopping the page until there is one."""
    offline_user = local_user()
    if offline_user:
        return offline_user

    if not auth_configured():
        st.markdown("<div class='section-title'>Login Setup Required</div>", unsafe_allow_html=True)
        st.markdown("Configure the identity provider in Streamlit secrets, or set `MOODLOG_LOCAL_USER` for offline use.")
        st.code(
            "[auth]\n"
            "redirect_uri = \"https://your-app.streamlit.app/oauth2callback\"\n"
            "cookie_secret = \"LONG_RANDOM_SECRET\"\n\n"
            "[auth.google]\n"
            "client_id = \"YOUR_CLIENT_ID\"\n"
            "client_secret = \"YOUR_CLIENT_SECRET\"\n"
            "server_metadata_url = \"https://accounts.google.com/.well-known/openid-configuration\"\n\n"
            "[app]\n"
            "API_BASE_URL = \"https://moodlog-api.example.com\"\n"
            "BACKEND_SESSION_SECRET = \"SHARED_SECRET\"",
            language="toml",
        )
        st.stop()

    if not st.user.is_logged_in:
        st.markdown("<div class='section-title'>Welcome to MoodLog</div>", unsafe_allow_html=True)
        st.markdown("Sign in to start journaling and tracking your moods.")
        if st.button("Sign in with Google", key="google_login"):
            st.login("google")
        st.stop()

    user_id = _identity_user_id()
    if not user_id:
        st.error("Your identity provider did not return a user id.")
        st.stop()
    return user_id


def get_display_name(user_id, profile=None):
    if profile is not None and profile.display_name:
        return profile.display_name
    user_name = str(getattr(st.user, "name", "") or "").strip()
    if user_name:
        return user_name.split()[0]
    email = str(getattr(st.user, "email", "") or "").strip()
    local = (email or user_id or "").split("@")[0].replace(".", " ").strip()
    return local.title() if local else "Friend"


@st.cache_resource
def _offline_store():
    return MemoryStore()


def build_store(user_id):
    base_url, token = api_settings()
    if base_url and token:
        client = ApiClient(base_url, token, user_id)
        return ApiStore(client, poll_interval=poll_seconds())
    logger.info("API_BASE_URL not configured, using the in-memory store")
    return _offline_store()


def get_session(user_id):
    session = st.session_state.get(SESSION_KEY)
    if session is not None and session.user_id == user_id and not session.closed:
        return session
    if session is not None:
        close_session()
    session = JournalSession(user_id, build_store(user_id))
    st.session_state[SESSION_KEY] = session
    return session


def get_live_entries(session):
    live = st.session_state.get(LIVE_KEY)
    if live is not None and live.subscription.active:
        return live
    live = LiveEntries(session)
    st.session_state[LIVE_KEY] = live
    return live


def close_session():
    live = st.session_state.pop(LIVE_KEY, None)
    if live is not None:
        live.stop()
    session = st.session_state.pop(SESSION_KEY, None)
    if session is None:
        return
    session.close()
    if isinstance(session.store, ApiStore):
        session.store.close()


def logout():
    close_session()
    if local_user():
        st.rerun()
    st.logout()
