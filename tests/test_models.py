from datetime import date, datetime, timezone

from conftest import USER_ID, make_record

from dashboard.data.models import (
    JournalEntry,
    NewEntry,
    UserProfile,
    UserSettings,
    decode_entries,
    is_valid_entry,
)


def test_from_record_decodes_wire_fields():
    entry = JournalEntry.from_record("k1", make_record("2024-02-03", mood="calm"))
    assert entry.id == "k1"
    assert entry.mood == "calm"
    assert entry.date == date(2024, 2, 3)
    assert entry.time == "08:30"
    assert entry.user_id == USER_ID
    assert entry.created_at == datetime(2024, 1, 1, 8, 30, tzinfo=timezone.utc)


def test_from_record_rejects_missing_fields():
    for field in ("title", "content", "mood", "date"):
        raw = make_record("2024-02-03")
        raw[field] = "   "
        assert JournalEntry.from_record("k1", raw) is None
    assert JournalEntry.from_record("", make_record("2024-02-03")) is None
    assert JournalEntry.from_record("k1", "not a record") is None


def test_from_record_drops_unknown_mood_and_bad_date():
    assert JournalEntry.from_record("k1", make_record("2024-02-03", mood="bored")) is None
    assert JournalEntry.from_record("k1", make_record("yesterday")) is None


def test_from_record_accepts_zulu_timestamps():
    raw = make_record("2024-02-03")
    raw["createdAt"] = "2024-02-03T10:15:00.000Z"
    entry = JournalEntry.from_record("k1", raw)
    assert entry.created_at == datetime(2024, 2, 3, 10, 15, tzinfo=timezone.utc)


def test_to_record_omits_id_and_uses_iso_timestamp():
    entry = JournalEntry.from_record("k1", make_record("2024-02-03"))
    record = entry.to_record()
    assert "id" not in record
    assert record["date"] == "2024-02-03"
    assert record["createdAt"] == "2024-01-01T08:30:00+00:00"
    assert record["userId"] == USER_ID


def test_new_entry_record_is_stamped_with_owner():
    created = datetime(2024, 5, 1, 7, 0, tzinfo=timezone.utc)
    record = NewEntry(
        title="  Morning  ",
        content="Slept well",
        mood="happy",
        date=date(2024, 5, 1),
        time="07:05:33",
        created_at=created,
    ).to_record("bob")
    assert record == {
        "title": "Morning",
        "content": "Slept well",
        "mood": "happy",
        "date": "2024-05-01",
        "time": "07:05",
        "createdAt": created.isoformat(),
        "userId": "bob",
    }


def test_is_valid_entry_checks_owner():
    entry = JournalEntry.from_record("k1", make_record("2024-02-03"))
    assert is_valid_entry(entry)
    assert is_valid_entry(entry, USER_ID)
    assert not is_valid_entry(entry, "mallory")
    assert not is_valid_entry(None)


def test_decode_entries_keeps_store_order_and_filters():
    raw = {
        "b": make_record("2024-02-02"),
        "a": make_record("2024-02-01"),
        "bad": make_record("2024-02-01", mood="meh"),
        "other": make_record("2024-02-01", user_id="mallory"),
    }
    entries = decode_entries(raw, USER_ID)
    assert [entry.id for entry in entries] == ["b", "a"]
    assert decode_entries(None, USER_ID) == []


def test_settings_defaults_and_fallbacks():
    assert UserSettings.from_record(None) == UserSettings("system", True, "private")
    settings = UserSettings.from_record({"theme": "neon", "notifications": False, "privacy": "public"})
    assert settings == UserSettings("system", False, "public")
    assert settings.to_record() == {"theme": "system", "notifications": False, "privacy": "public"}


def test_profile_round_trip_fields():
    profile = UserProfile.from_record({"displayName": "Ada", "updatedAt": "2024-01-01T00:00:00+00:00"})
    assert profile.display_name == "Ada"
    assert profile.photo_url == ""
    record = profile.to_record()
    assert record["displayName"] == "Ada"
    assert "photoURL" not in record
    assert UserProfile.from_record(None) is None
