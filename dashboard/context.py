from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from dashboard.data.journal import JournalSession, LiveEntries
from dashboard.data.models import JournalEntry, UserSettings
from dashboard.stats import DashboardStats, compute_dashboard_stats


@dataclass
class DashboardContext:
    session: JournalSession
    display_name: str
    live: Optional[LiveEntries] = None
    entries: List[JournalEntry] = field(default_factory=list)
    stats: DashboardStats = field(default_factory=DashboardStats)
    settings: UserSettings = field(default_factory=UserSettings)
    today: date = field(default_factory=date.today)
    snapshot_version: int = -1

    @property
    def user_id(self):
        return self.session.user_id

    def refresh(self, today=None):
        """Pull the newest live snapshot and recompute stats when it changed."""
        today = today or date.today()
        if self.live is None:
            return False
        version = self.live.version
        if version == self.snapshot_version and today == self.today:
            return False
        self.entries = self.live.entries
        self.stats = compute_dashboard_stats(self.entries, today)
        self.today = today
        self.snapshot_version = version
        return True
