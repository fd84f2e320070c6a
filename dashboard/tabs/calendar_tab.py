from datetime import date

import streamlit as st

from dashboard.data.loaders import daily_mood_map
from dashboard.state import session_slices
from dashboard.stats import entries_by_date
from dashboard.tabs.entries_tab import render_entry_list
from dashboard.visualizations import (
    build_month_calendar_html,
    build_mood_pixel_grid,
    month_last_day,
    mood_heatmap,
    shift_month,
)

SLICE = "calendar"


def _navigate(delta):
    month_ref = session_slices.get_date(SLICE, "month", date.today().replace(day=1))
    session_slices.set_value(SLICE, "month", shift_month(month_ref, delta))


def _load_day_entries(ctx, selected_day):
    """Point query for one day, refreshed whenever the live snapshot changes."""
    cache_key = (selected_day.isoformat(), ctx.snapshot_version)
    if session_slices.get_value(SLICE, "day_key") != cache_key:
        result = ctx.session.load_entries_by_date(selected_day)
        session_slices.update_slice(SLICE, {"day_key": cache_key, "day_result": result})
    return session_slices.get_value(SLICE, "day_result")


def render_calendar_tab(ctx, on_edit=None):
    st.markdown("<div class='section-title'>Calendar</div>", unsafe_allow_html=True)
    today = ctx.today
    month_ref = session_slices.get_date(SLICE, "month", today.replace(day=1))

    nav = st.columns([1, 4, 1])
    nav[0].button("‹ Prev", key="calendar.prev", on_click=_navigate, args=(-1,))
    nav[1].markdown(f"<div class='section-title' style='text-align:center'>{month_ref.strftime('%B %Y')}</div>", unsafe_allow_html=True)
    nav[2].button("Next ›", key="calendar.next", on_click=_navigate, args=(1,))

    selected_day = session_slices.get_date(SLICE, "selected", today)
    lookup = entries_by_date(ctx.entries)
    st.markdown(
        build_month_calendar_html(month_ref.year, month_ref.month, lookup, selected_date=selected_day, today=today),
        unsafe_allow_html=True,
    )

    picked = st.date_input(
        "Select a day",
        value=selected_day,
        min_value=date(2000, 1, 1),
        max_value=max(month_last_day(month_ref), today),
        key="calendar.pick",
    )
    if picked != selected_day:
        session_slices.update_slice(SLICE, {"selected": picked, "month": picked.replace(day=1)})
        st.rerun()

    st.markdown(f"<div class='small-label' style='margin-top:8px;'>Entries for {selected_day.strftime('%A, %B %d, %Y')}</div>", unsafe_allow_html=True)
    result = _load_day_entries(ctx, selected_day)
    if not result.ok:
        st.warning("Could not load entries for this day. Showing nothing until the store is reachable again.")
    elif not result.entries:
        st.caption("No entries for this date.")
    else:
        render_entry_list(ctx, result.entries, f"calendar.{selected_day.isoformat()}", on_edit=on_edit)

    with st.expander("Mood pixel board"):
        z, hover_text, x_labels, y_labels = build_mood_pixel_grid(
            month_ref.year,
            month_ref.month,
            daily_mood_map(ctx.entries),
        )
        st.plotly_chart(
            mood_heatmap(z, hover_text, x_labels=x_labels, y_labels=y_labels, title="Monthly Mood Grid"),
            use_container_width=True,
        )
