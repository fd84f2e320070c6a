from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from dashboard.constants import DEFAULT_SETTINGS, MOOD_SET, PRIVACY_LEVELS, THEMES

logger = logging.getLogger(__name__)

REQUIRED_TEXT_FIELDS = ("title", "content", "mood", "date")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_day(value) -> date:
    """Accept a date, datetime or YYYY-MM-DD string and return the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def parse_timestamp(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def _normalize_time_value(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%H:%M")
    value_str = str(value).strip()
    return value_str[:5] if value_str else ""


@dataclass(frozen=True)
class JournalEntry:
    id: str
    title: str
    content: str
    mood: str
    date: date
    time: str = ""
    created_at: Optional[datetime] = None
    user_id: str = ""

    @property
    def date_iso(self) -> str:
        return self.date.isoformat()

    @classmethod
    def from_record(cls, entry_id, raw) -> Optional["JournalEntry"]:
        """Decode one stored record; malformed records come back as None."""
        if not isinstance(raw, dict):
            return None
        entry_id = _clean_text(entry_id)
        values = {key: _clean_text(raw.get(key)) for key in REQUIRED_TEXT_FIELDS}
        if not entry_id or not all(values.values()):
            return None
        if values["mood"] not in MOOD_SET:
            logger.debug("Dropping entry %s with unknown mood %r", entry_id, values["mood"])
            return None
        try:
            day = parse_day(values["date"])
        except ValueError:
            logger.debug("Dropping entry %s with bad date %r", entry_id, values["date"])
            return None
        return cls(
            id=entry_id,
            title=values["title"],
            content=values["content"],
            mood=values["mood"],
            date=day,
            time=_normalize_time_value(raw.get("time")),
            created_at=parse_timestamp(raw.get("createdAt")),
            user_id=_clean_text(raw.get("userId")),
        )

    def to_record(self) -> Dict[str, Any]:
        created_at = self.created_at or _utcnow()
        return {
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "date": self.date.isoformat(),
            "time": self.time,
            "createdAt": created_at.isoformat(),
            "userId": self.user_id,
        }

    def with_changes(self, **changes) -> "JournalEntry":
        return replace(self, **changes)


@dataclass
class NewEntry:
    title: str
    content: str
    mood: str
    date: date
    time: str = ""
    created_at: datetime = field(default_factory=_utcnow)

    def to_record(self, user_id: str) -> Dict[str, Any]:
        return {
            "title": self.title.strip(),
            "content": self.content.strip(),
            "mood": self.mood,
            "date": parse_day(self.date).isoformat(),
            "time": _normalize_time_value(self.time),
            "createdAt": self.created_at.isoformat(),
            "userId": user_id,
        }


def is_valid_entry(entry, user_id: Optional[str] = None) -> bool:
    if entry is None:
        return False
    if not (entry.id and entry.title and entry.content and entry.mood and entry.date):
        return False
    if entry.mood not in MOOD_SET:
        return False
    if user_id is not None and entry.user_id != user_id:
        return False
    return True


def decode_entries(raw_collection, user_id: Optional[str] = None) -> list[JournalEntry]:
    """Turn a stored ``{key: record}`` collection into valid entries, keeping store order."""
    if not isinstance(raw_collection, dict):
        return []
    entries = []
    for key, raw in raw_collection.items():
        entry = JournalEntry.from_record(key, raw)
        if is_valid_entry(entry, user_id):
            entries.append(entry)
    return entries


@dataclass(frozen=True)
class UserSettings:
    theme: str = DEFAULT_SETTINGS["theme"]
    notifications: bool = DEFAULT_SETTINGS["notifications"]
    privacy: str = DEFAULT_SETTINGS["privacy"]

    @classmethod
    def from_record(cls, raw) -> "UserSettings":
        if not isinstance(raw, dict):
            return cls()
        theme = raw.get("theme")
        privacy = raw.get("privacy")
        notifications = raw.get("notifications", DEFAULT_SETTINGS["notifications"])
        return cls(
            theme=theme if theme in THEMES else DEFAULT_SETTINGS["theme"],
            notifications=bool(notifications),
            privacy=privacy if privacy in PRIVACY_LEVELS else DEFAULT_SETTINGS["privacy"],
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "theme": self.theme,
            "notifications": self.notifications,
            "privacy": self.privacy,
        }


@dataclass(frozen=True)
class UserProfile:
    display_name: str = ""
    photo_url: str = ""
    updated_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, raw) -> Optional["UserProfile"]:
        if not isinstance(raw, dict):
            return None
        return cls(
            display_name=_clean_text(raw.get("displayName")),
            photo_url=_clean_text(raw.get("photoURL")),
            updated_at=parse_timestamp(raw.get("updatedAt")),
        )

    def to_record(self) -> Dict[str, Any]:
        payload = {"updatedAt": (self.updated_at or _utcnow()).isoformat()}
        if self.display_name:
            payload["displayName"] = self.display_name
        if self.photo_url:
            payload["photoURL"] = self.photo_url
        return payload
