MOODS = ("happy", "sad", "angry", "excited", "calm", "anxious")
MOOD_SET = frozenset(MOODS)
MOOD_COLORS = {
    "happy": "#fbbf24",
    "sad": "#3b82f6",
    "angry": "#ef4444",
    "excited": "#8b5cf6",
    "calm": "#10b981",
    "anxious": "#6b7280",
}
MOOD_EMOJIS = {
    "happy": "😊",
    "sad": "😢",
    "angry": "😠",
    "excited": "🤩",
    "calm": "😌",
    "anxious": "😰",
}
MOOD_TO_INT = {m: i for i, m in enumerate(MOODS)}

WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

THEMES = ("light", "dark", "system")
PRIVACY_LEVELS = ("private", "public")
DEFAULT_SETTINGS = {
    "theme": "system",
    "notifications": True,
    "privacy": "private",
}

USERS_ROOT = "users"
ENTRIES_KEY = "entries"
SETTINGS_KEY = "settings"
PROFILE_KEY = "profile"

RECENT_ENTRIES_LIMIT = 5
DEFAULT_POLL_SECONDS = 3.0
