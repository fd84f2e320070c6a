from datetime import date

from conftest import USER_ID, make_entry, make_record

from dashboard.context import DashboardContext
from dashboard.data.journal import LiveEntries
from dashboard.data.loaders import daily_mood_map, entries_frame, table_rows
from dashboard.visualizations import (
    build_month_calendar_html,
    build_mood_pixel_grid,
    month_last_day,
    mood_badge_html,
    shift_month,
)


def test_shift_month_and_last_day():
    assert shift_month(date(2024, 1, 20), -1) == date(2023, 12, 1)
    assert shift_month(date(2024, 12, 5), 1) == date(2025, 1, 1)
    assert month_last_day(date(2024, 2, 10)) == date(2024, 2, 29)


def test_entries_frame_sorted_newest_first():
    entries = [
        make_entry("a", "2024-03-01", time="08:00"),
        make_entry("b", "2024-03-02", time="07:00"),
        make_entry("c", "2024-03-02", time="21:00"),
    ]
    df = entries_frame(entries)
    assert list(df["id"]) == ["c", "b", "a"]
    assert entries_frame([]).empty
    assert list(table_rows(entries).columns) == ["date", "time", "mood", "title"]
    assert table_rows(entries)["date"].iloc[0] == "2024-03-02"


def test_daily_mood_map_keeps_latest_mood_per_day():
    entries = [
        make_entry("a", "2024-03-02", mood="sad", time="07:00"),
        make_entry("b", "2024-03-02", mood="happy", time="21:00"),
        make_entry("c", "2024-03-05", mood="calm"),
    ]
    assert daily_mood_map(entries) == {date(2024, 3, 2): "happy", date(2024, 3, 5): "calm"}
    assert daily_mood_map([]) == {}


def test_mood_pixel_grid_follows_calendar_layout():
    z, text, x_labels, y_labels = build_mood_pixel_grid(2024, 2, {date(2024, 2, 3): "sad"})
    assert z.shape == (5, 7)
    assert z[0, 5] == 1
    assert text[0][5] == "2024-02-03 • sad"
    assert text[0][3] == "2024-02-01 • No entry"
    assert text[0][0] == ""
    assert x_labels == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert y_labels[0] == "W5"


def test_month_calendar_html_marks_entries_and_days():
    lookup = {date(2024, 3, 15): [make_entry("a", "2024-03-15", title="<b>x</b>", mood="calm")]}
    html = build_month_calendar_html(2024, 3, lookup, selected_date=date(2024, 3, 15), today=date(2024, 3, 20))
    assert "calendar-cell selected" in html
    assert "calendar-cell today" in html
    assert "&lt;b&gt;x&lt;/b&gt;" in html
    assert html.count("<tr>") == 1 + 5


def test_mood_badge_escapes_label():
    assert "happy" in mood_badge_html("happy")


def test_context_refresh_recomputes_on_new_snapshot(store, session):
    live = LiveEntries(session)
    ctx = DashboardContext(session=session, display_name="Alice", live=live)
    today = date(2024, 3, 15)
    assert ctx.refresh(today) is True
    assert ctx.stats.total_entries == 0
    assert ctx.refresh(today) is False

    store.write(f"users/{USER_ID}/entries/k1", make_record("2024-03-15"))
    assert ctx.refresh(today) is True
    assert ctx.stats.total_entries == 1
    assert ctx.stats.current_streak == 1
    assert ctx.refresh(date(2024, 3, 17)) is True
    assert ctx.stats.current_streak == 0
    live.stop()
