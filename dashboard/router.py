import streamlit as st

from dashboard.auth import poll_seconds
from dashboard.state import session_slices
from dashboard.tabs.calendar_tab import render_calendar_tab
from dashboard.tabs.dashboard_tab import render_dashboard_tab
from dashboard.tabs.entries_tab import render_entries_tab
from dashboard.tabs.entry_form import render_entry_form
from dashboard.tabs.profile_tab import render_profile_tab
from dashboard.tabs.settings_tab import render_settings_tab


TAB_OPTIONS = [
    "Dashboard",
    "New Entry",
    "Entries",
    "Calendar",
    "Profile",
    "Settings",
]

EDITOR_SLICE = "editor"


def start_editing(entry):
    session_slices.set_value(EDITOR_SLICE, "entry", entry)
    st.rerun()


def stop_editing():
    session_slices.clear_slice(EDITOR_SLICE)
    st.rerun()


def render_router(ctx):
    editing = session_slices.get_value(EDITOR_SLICE, "entry")
    if editing is not None:
        return render_entry_form(ctx, entry=editing, on_done=stop_editing)

    active = st.session_state.get("ui.active_tab", TAB_OPTIONS[0])
    active = st.segmented_control(
        "Workspace",
        TAB_OPTIONS,
        key="ui.active_tab",
        default=active,
    )

    if active == "New Entry":
        return render_entry_form(ctx)

    if active == "Entries":
        return _render_entries(ctx)

    if active == "Calendar":
        return _render_calendar(ctx)

    if active == "Profile":
        return render_profile_tab(ctx)

    if active == "Settings":
        return render_settings_tab(ctx)

    return _render_dashboard(ctx)


@st.fragment(run_every=poll_seconds())
def _render_dashboard(ctx):
    ctx.refresh()
    render_dashboard_tab(ctx, on_edit=start_editing)


@st.fragment(run_every=poll_seconds())
def _render_entries(ctx):
    ctx.refresh()
    render_entries_tab(ctx, on_edit=start_editing)


@st.fragment(run_every=poll_seconds())
def _render_calendar(ctx):
    ctx.refresh()
    render_calendar_tab(ctx, on_edit=start_editing)
