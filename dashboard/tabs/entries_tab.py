import streamlit as st

from dashboard.data.loaders import table_rows
from dashboard.stats import recent_entries
from dashboard.visualizations import mood_badge_html


def render_entry_list(ctx, entries, key_prefix, on_edit=None):
    for entry in entries:
        with st.container(border=True):
            top = st.columns([4, 1])
            top[0].markdown(f"**{entry.title}**")
            top[1].markdown(mood_badge_html(entry.mood), unsafe_allow_html=True)
            st.caption(f"{entry.date.isoformat()} {entry.time}".strip())
            st.write(entry.content)
            actions = st.columns([1, 1, 6])
            if on_edit is not None and actions[0].button("Edit", key=f"{key_prefix}.edit.{entry.id}"):
                on_edit(entry)
            if actions[1].button("Delete", key=f"{key_prefix}.delete.{entry.id}"):
                if ctx.session.delete(entry.id):
                    st.toast("Entry deleted.")
                else:
                    st.error("Could not delete the entry.")


def render_entries_tab(ctx, on_edit=None):
    st.markdown("<div class='section-title'>All Entries</div>", unsafe_allow_html=True)
    entries = recent_entries(ctx.entries, limit=None)
    if not entries:
        st.info("No entries yet. Write your first one from the New Entry tab.")
        return

    view = st.segmented_control("View", ["Cards", "Table"], default="Cards", key="entries.view")
    if view == "Table":
        st.dataframe(table_rows(entries), hide_index=True, use_container_width=True)
        return
    render_entry_list(ctx, entries, "entries", on_edit=on_edit)
