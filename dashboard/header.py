import streamlit as st


def render_global_header(ctx):
    stats = ctx.stats
    st.markdown("<div class='small-label'>MoodLog</div>", unsafe_allow_html=True)
    cols = st.columns([3, 1])
    cols[0].markdown(f"### Hi, {ctx.display_name}")
    streak = stats.current_streak
    if streak:
        cols[1].markdown(f"🔥 **{streak}** day{'s' if streak != 1 else ''} in a row")
    else:
        cols[1].caption("Write today to start a streak")
    st.caption(ctx.today.strftime("%A, %B %d, %Y"))
