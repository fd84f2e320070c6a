from __future__ import annotations

import pandas as pd

from dashboard.data.models import JournalEntry

ENTRY_COLUMNS = ["id", "date", "time", "mood", "title", "content", "created_at"]


def entries_frame(entries: list[JournalEntry]) -> pd.DataFrame:
    if not entries:
        return pd.DataFrame(columns=ENTRY_COLUMNS)
    df = pd.DataFrame(
        [
            {
                "id": entry.id,
                "date": entry.date,
                "time": entry.time,
                "mood": entry.mood,
                "title": entry.title,
                "content": entry.content,
                "created_at": pd.Timestamp(entry.created_at) if entry.created_at else pd.NaT,
            }
            for entry in entries
        ],
        columns=ENTRY_COLUMNS,
    )
    return df.sort_values(["date", "time"], ascending=False, kind="stable").reset_index(drop=True)


def daily_mood_map(entries: list[JournalEntry]) -> dict:
    """Latest mood per day, keyed by date, for the mood pixel grid."""
    df = entries_frame(entries)
    if df.empty:
        return {}
    latest = df.sort_values(["date", "time"], kind="stable").groupby("date", sort=False).last()
    return {day: mood for day, mood in latest["mood"].items()}


def table_rows(entries: list[JournalEntry]) -> pd.DataFrame:
    df = entries_frame(entries)
    if df.empty:
        return df[["date", "time", "mood", "title"]]
    df = df.copy()
    df["date"] = df["date"].apply(lambda d: d.isoformat())
    return df[["date", "time", "mood", "title"]]
