import streamlit as st

from dashboard.visualizations import mood_badge_html, mood_distribution_chart, weekly_activity_chart


def _render_metric_cards(stats):
    cols = st.columns(4)
    cols[0].metric("Total Entries", stats.total_entries, help="Your journal collection")
    cols[1].metric("Current Streak", stats.current_streak, help="Days in a row")
    cols[2].metric("This Week", stats.this_week_entries, help="Entries in the last 7 days")
    with cols[3]:
        st.markdown("<div class='small-label'>Common Mood</div>", unsafe_allow_html=True)
        if stats.most_common_mood:
            st.markdown(mood_badge_html(stats.most_common_mood), unsafe_allow_html=True)
        else:
            st.caption("No data yet")


def render_recent_entries(entries, on_edit=None):
    if not entries:
        st.caption("No entries yet. Start journaling to see your history here.")
        return
    for entry in entries:
        with st.container(border=True):
            top = st.columns([4, 1])
            top[0].markdown(f"**{entry.title}**")
            top[1].markdown(mood_badge_html(entry.mood), unsafe_allow_html=True)
            st.caption(f"{entry.date.isoformat()} {entry.time}".strip())
            st.write(entry.content)
            if on_edit is not None and st.button("Edit", key=f"recent.edit.{entry.id}"):
                on_edit(entry)


def render_dashboard_tab(ctx, on_edit=None):
    stats = ctx.stats
    st.markdown(f"<div class='section-title'>Welcome back, {ctx.display_name}</div>", unsafe_allow_html=True)
    _render_metric_cards(stats)

    chart_cols = st.columns(2)
    with chart_cols[0]:
        if stats.total_entries:
            st.plotly_chart(weekly_activity_chart(stats.weekly_activity), use_container_width=True)
        else:
            st.info("No entries yet. Start journaling to see your activity.")
    with chart_cols[1]:
        if stats.mood_distribution:
            st.plotly_chart(mood_distribution_chart(stats.mood_distribution), use_container_width=True)
        else:
            st.info("No mood data yet. Create entries to track your emotions.")

    st.markdown("<div class='small-label' style='margin-top:8px;'>Recent entries</div>", unsafe_allow_html=True)
    render_recent_entries(stats.recent_entries, on_edit=on_edit)
