"""Derived statistics over a snapshot of journal entries.

Every function here is a pure function of ``(entries, now)``: no I/O, and the
input sequence is never mutated. ``now`` may be a ``date`` or a ``datetime``;
only its calendar day matters.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional

from dashboard.constants import RECENT_ENTRIES_LIMIT, WEEKDAY_LABELS
from dashboard.data.models import JournalEntry, is_valid_entry


@dataclass(frozen=True)
class DayBucket:
    day: date
    label: str
    count: int


@dataclass(frozen=True)
class DashboardStats:
    total_entries: int = 0
    current_streak: int = 0
    most_common_mood: Optional[str] = None
    this_week_entries: int = 0
    weekly_activity: List[DayBucket] = field(default_factory=list)
    mood_distribution: Dict[str, int] = field(default_factory=dict)
    recent_entries: List[JournalEntry] = field(default_factory=list)
    today_entries: int = 0
    days_journaled: int = 0


def _today(now) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def _valid(entries: Iterable[JournalEntry]) -> List[JournalEntry]:
    return [entry for entry in entries or [] if is_valid_entry(entry)]


def total_count(entries) -> int:
    return len(_valid(entries))


def current_streak(entries, now=None) -> int:
    """Length of the unbroken run of days with entries, ending today.

    Days are walked newest first against an expected offset from today that
    grows by one per matched day; the first larger gap ends the run.
    Repeated dates are collapsed so one day never counts twice and future
    dates are ignored.
    """
    today = _today(now)
    days = sorted({entry.date for entry in _valid(entries)}, reverse=True)
    streak = 0
    for day in days:
        diff_days = (today - day).days
        if diff_days < 0:
            continue
        if diff_days == streak:
            streak += 1
        elif diff_days > streak:
            break
    return streak


def most_common_mood(entries) -> Optional[str]:
    distribution = mood_distribution(entries)
    best = None
    best_count = 0
    for mood, count in distribution.items():
        if count > best_count:
            best, best_count = mood, count
    return best


def this_week_count(entries, now=None) -> int:
    today = _today(now)
    start = today - timedelta(days=6)
    return sum(1 for entry in _valid(entries) if start <= entry.date <= today)


def today_count(entries, now=None) -> int:
    today = _today(now)
    return sum(1 for entry in _valid(entries) if entry.date == today)


def days_journaled(entries) -> int:
    """Number of distinct calendar days with at least one entry."""
    return len({entry.date for entry in _valid(entries)})


def weekly_activity(entries, now=None) -> List[DayBucket]:
    today = _today(now)
    counts = Counter(entry.date for entry in _valid(entries))
    buckets = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        buckets.append(DayBucket(day=day, label=WEEKDAY_LABELS[day.weekday()], count=counts.get(day, 0)))
    return buckets


def mood_distribution(entries) -> Dict[str, int]:
    # dict keeps first-encounter order, which is also the tie-break order
    histogram: Dict[str, int] = {}
    for entry in _valid(entries):
        histogram[entry.mood] = histogram.get(entry.mood, 0) + 1
    return histogram


def mood_percentages(entries) -> Dict[str, float]:
    distribution = mood_distribution(entries)
    total = sum(distribution.values())
    if total == 0:
        return {}
    return {mood: round(count / total * 100, 1) for mood, count in distribution.items()}


def entries_by_date(entries) -> Dict[date, List[JournalEntry]]:
    lookup: Dict[date, List[JournalEntry]] = {}
    for entry in _valid(entries):
        lookup.setdefault(entry.date, []).append(entry)
    return lookup


def recent_entries(entries, limit: int = RECENT_ENTRIES_LIMIT) -> List[JournalEntry]:
    def sort_key(entry):
        created = entry.created_at.timestamp() if entry.created_at else 0.0
        return entry.date, created

    ordered = sorted(_valid(entries), key=sort_key, reverse=True)
    if limit is None:
        return ordered
    return ordered[: max(0, limit)]


def compute_dashboard_stats(entries, now=None) -> DashboardStats:
    snapshot = _valid(entries)
    today = _today(now)
    return DashboardStats(
        total_entries=len(snapshot),
        current_streak=current_streak(snapshot, today),
        most_common_mood=most_common_mood(snapshot),
        this_week_entries=this_week_count(snapshot, today),
        weekly_activity=weekly_activity(snapshot, today),
        mood_distribution=mood_distribution(snapshot),
        recent_entries=recent_entries(snapshot),
        today_entries=today_count(snapshot, today),
        days_journaled=days_journaled(snapshot),
    )
