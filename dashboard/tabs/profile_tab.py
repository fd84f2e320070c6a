import streamlit as st

from dashboard.constants import MOOD_COLORS, MOOD_EMOJIS
from dashboard.stats import mood_percentages, recent_entries


def render_profile_tab(ctx):
    st.markdown("<div class='section-title'>Profile</div>", unsafe_allow_html=True)
    profile = ctx.session.get_profile()

    with st.form("profile.form"):
        display_name = st.text_input(
            "Display name",
            value=(profile.display_name if profile else "") or ctx.display_name,
        )
        photo_url = st.text_input("Photo URL", value=profile.photo_url if profile else "")
        if st.form_submit_button("Save profile"):
            if ctx.session.update_profile(display_name=display_name, photo_url=photo_url):
                st.success("Profile updated.")
            else:
                st.error("Could not update your profile.")

    if profile and profile.photo_url:
        st.image(profile.photo_url, width=96)

    cols = st.columns(4)
    cols[0].metric("Total entries", ctx.stats.total_entries)
    cols[1].metric("Current streak", ctx.stats.current_streak)
    cols[2].metric("Today", ctx.stats.today_entries)
    cols[3].metric("Days journaled", ctx.stats.days_journaled)

    st.markdown("<div class='small-label' style='margin-top:8px;'>Mood breakdown</div>", unsafe_allow_html=True)
    percentages = mood_percentages(ctx.entries)
    if not percentages:
        st.caption("No mood data yet.")
    for mood, percent in percentages.items():
        st.markdown(
            f"<span class='mood-dot' style='background:{MOOD_COLORS[mood]}'></span>"
            f"{MOOD_EMOJIS[mood]} {mood.title()}: {percent}% ({ctx.stats.mood_distribution.get(mood, 0)})",
            unsafe_allow_html=True,
        )
        st.progress(min(1.0, percent / 100))

    st.markdown("<div class='small-label' style='margin-top:8px;'>Recent entries</div>", unsafe_allow_html=True)
    for entry in recent_entries(ctx.entries, limit=3):
        st.markdown(f"**{entry.title}** · {entry.date.isoformat()} · {entry.mood}")
