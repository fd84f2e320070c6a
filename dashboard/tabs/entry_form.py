import logging
from datetime import date, datetime

import streamlit as st

from dashboard.constants import MOODS, MOOD_EMOJIS
from dashboard.data.models import NewEntry

logger = logging.getLogger(__name__)


def _mood_label(mood):
    return f"{MOOD_EMOJIS.get(mood, '')} {mood.title()}"


def _parse_time(value):
    if not value:
        return datetime.now().time().replace(second=0, microsecond=0)
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        return datetime.now().time().replace(second=0, microsecond=0)


def render_entry_form(ctx, entry=None, on_done=None):
    """Create a new entry, or edit ``entry`` when one is given."""
    editing = entry is not None
    form_key = f"entry_form.{entry.id}" if editing else "entry_form.new"
    title_text = "Edit Entry" if editing else "New Journal Entry"
    st.markdown(f"<div class='section-title'>{title_text}</div>", unsafe_allow_html=True)

    with st.form(form_key, clear_on_submit=not editing):
        title = st.text_input("Title", value=entry.title if editing else "")
        mood = st.selectbox(
            "How are you feeling?",
            MOODS,
            index=MOODS.index(entry.mood) if editing else 0,
            format_func=_mood_label,
        )
        content = st.text_area("What's on your mind?", value=entry.content if editing else "", height=180)
        cols = st.columns(2)
        entry_day = cols[0].date_input("Date", value=entry.date if editing else date.today(), disabled=editing)
        entry_time = cols[1].time_input("Time", value=_parse_time(entry.time if editing else ""))
        submitted = st.form_submit_button("Update Entry" if editing else "Save Entry")

    if editing and st.button("Cancel", key=f"{form_key}.cancel") and on_done is not None:
        on_done()
        return

    if not submitted:
        return

    if not title.strip() or not content.strip():
        st.error("Please fill in both the title and the content.")
        return

    time_value = entry_time.strftime("%H:%M")
    if editing:
        updated = entry.with_changes(title=title.strip(), content=content.strip(), mood=mood, time=time_value)
        ok = ctx.session.update(updated)
        if ok:
            st.success("Entry updated.")
        else:
            st.error("Could not update the entry. Please try again.")
    else:
        new_id = ctx.session.add(
            NewEntry(title=title, content=content, mood=mood, date=entry_day, time=time_value)
        )
        ok = new_id is not None
        if ok:
            logger.info("Created entry %s for %s", new_id, ctx.user_id)
            st.success("Entry saved.")
        else:
            st.error("Could not save the entry. Please try again.")
    if ok and on_done is not None:
        on_done()
