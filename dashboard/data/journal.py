"""Per-user access to journal entries, settings and profile.

A ``JournalSession`` is created when a user signs in and closed when they
sign out. Every store failure stops here: reads degrade to empty results and
writes report ``False``/``None``. ``load_entries`` is the strict variant for
callers that need to tell "no entries" apart from "the fetch failed".
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from dashboard.constants import ENTRIES_KEY, PROFILE_KEY, SETTINGS_KEY
from dashboard.data.errors import SessionClosedError, StoreError
from dashboard.data.models import (
    JournalEntry,
    NewEntry,
    UserProfile,
    UserSettings,
    decode_entries,
    parse_day,
)
from dashboard.data.store import Store, Subscription, user_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    entries: List[JournalEntry] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class JournalSession:
    def __init__(self, user_id: str, store: Store):
        if not user_id:
            raise ValueError("An authenticated user id is required")
        self.user_id = user_id
        self.store = store
        self._subscriptions: list[Subscription] = []
        self._lock = threading.Lock()
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self):
        if self._closed:
            raise SessionClosedError(f"Session for {self.user_id} is closed")

    def _entries_path(self, *parts) -> str:
        return user_path(self.user_id, ENTRIES_KEY, *parts)

    # Entries

    def load_entries(self) -> FetchResult:
        self._ensure_open()
        try:
            raw = self.store.read(self._entries_path())
        except StoreError as exc:
            logger.exception("Error fetching journal entries for %s", self.user_id)
            return FetchResult(error=str(exc) or type(exc).__name__)
        return FetchResult(entries=decode_entries(raw, self.user_id))

    def load_entries_by_date(self, day) -> FetchResult:
        self._ensure_open()
        try:
            day_iso = parse_day(day).isoformat()
            raw = self.store.read(self._entries_path(), order_by="date", equal_to=day_iso)
        except (StoreError, ValueError) as exc:
            logger.exception("Error fetching entries by date %s for %s", day, self.user_id)
            return FetchResult(error=str(exc) or type(exc).__name__)
        entries = [entry for entry in decode_entries(raw, self.user_id) if entry.date_iso == day_iso]
        return FetchResult(entries=entries)

    def fetch_all(self) -> List[JournalEntry]:
        return self.load_entries().entries

    def fetch_by_date(self, day) -> List[JournalEntry]:
        return self.load_entries_by_date(day).entries

    def subscribe(self, on_change: Callable[[List[JournalEntry]], None]) -> Subscription:
        self._ensure_open()

        def _on_snapshot(raw):
            entries = decode_entries(raw, self.user_id)
            try:
                on_change(entries)
            except Exception:
                logger.exception("Entry subscriber for %s raised", self.user_id)

        subscription = self.store.subscribe(self._entries_path(), _on_snapshot)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def add(self, new_entry: NewEntry) -> Optional[str]:
        self._ensure_open()
        try:
            record = new_entry.to_record(self.user_id)
            return self.store.push(self._entries_path(), record)
        except (StoreError, ValueError):
            logger.exception("Error adding journal entry for %s", self.user_id)
            return None

    def update(self, entry: JournalEntry) -> bool:
        self._ensure_open()
        if not entry.id or "/" in entry.id:
            logger.warning("Refusing to update entry with invalid id %r for %s", entry.id, self.user_id)
            return False
        if entry.user_id and entry.user_id != self.user_id:
            logger.warning("Refusing to update entry %s owned by another user", entry.id)
            return False
        try:
            record = entry.with_changes(user_id=self.user_id).to_record()
            self.store.write(self._entries_path(entry.id), record)
        except StoreError:
            logger.exception("Error updating journal entry %s", entry.id)
            return False
        return True

    def delete(self, entry_id: str) -> bool:
        self._ensure_open()
        if not entry_id or not str(entry_id).strip() or "/" in str(entry_id):
            logger.warning("Refusing to delete entry with invalid id %r for %s", entry_id, self.user_id)
            return False
        try:
            self.store.delete(self._entries_path(entry_id))
        except StoreError:
            logger.exception("Error deleting journal entry %s", entry_id)
            return False
        return True

    # Settings

    def get_settings(self) -> UserSettings:
        self._ensure_open()
        path = user_path(self.user_id, SETTINGS_KEY)
        try:
            raw = self.store.read(path)
        except StoreError:
            logger.exception("Error fetching user settings for %s", self.user_id)
            return UserSettings()
        if raw is None:
            defaults = UserSettings()
            self.save_settings(defaults)
            return defaults
        return UserSettings.from_record(raw)

    def save_settings(self, settings: UserSettings) -> bool:
        self._ensure_open()
        try:
            self.store.write(user_path(self.user_id, SETTINGS_KEY), settings.to_record())
        except StoreError:
            logger.exception("Error saving user settings for %s", self.user_id)
            return False
        return True

    # Profile

    def get_profile(self) -> Optional[UserProfile]:
        self._ensure_open()
        try:
            raw = self.store.read(user_path(self.user_id, PROFILE_KEY))
        except StoreError:
            logger.exception("Error fetching user profile for %s", self.user_id)
            return None
        return UserProfile.from_record(raw)

    def update_profile(self, display_name: Optional[str] = None, photo_url: Optional[str] = None) -> bool:
        self._ensure_open()
        profile = UserProfile(
            display_name=(display_name or "").strip(),
            photo_url=(photo_url or "").strip(),
        )
        try:
            self.store.write(user_path(self.user_id, PROFILE_KEY), profile.to_record())
        except StoreError:
            logger.exception("Error updating user profile for %s", self.user_id)
            return False
        return True

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions = list(self._subscriptions)
            self._subscriptions.clear()
        for subscription in subscriptions:
            subscription.cancel()
        logger.debug("Closed journal session for %s", self.user_id)


class LiveEntries:
    """Latest entry snapshot from a session subscription.

    Each emission replaces the previous snapshot wholesale; ``version`` grows
    by one per emission so the UI can tell when to redraw.
    """

    def __init__(self, session: JournalSession):
        self._lock = threading.Lock()
        self._entries: List[JournalEntry] = []
        self._version = 0
        self.subscription = session.subscribe(self._on_change)

    def _on_change(self, entries):
        with self._lock:
            self._entries = list(entries)
            self._version += 1

    @property
    def entries(self) -> List[JournalEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def stop(self) -> None:
        self.subscription.cancel()
