"""
Per-user daily generation quota over a rolling 24-hour window.
"""

from datetime import timedelta

from workout_generator.errors import QuotaExceeded
from workout_generator.workout_db import utc_now


DAILY_GENERATION_LIMIT = 100
WINDOW = timedelta(hours=24)


class QuotaGuard:
    """Rejects generation requests once a user has hit the daily ceiling."""

    def __init__(self, db, limit=DAILY_GENERATION_LIMIT, window=WINDOW, exempt_admins=True):
        self.db = db
        self.limit = limit
        self.window = window
        self.exempt_admins = exempt_admins

    def count_recent(self, user_id, now=None):
        """Workouts the user created in (now - window, now]."""
        now = now or utc_now()
        return self.db.count_workouts_since(user_id, since=now - self.window, until=now)

    def check(self, user_id, is_admin=False, now=None):
        """
        Raise QuotaExceeded if the user may not generate right now.

        Returns the number of generations used in the current window.
        """
        used = self.count_recent(user_id, now=now)
        if is_admin and self.exempt_admins:
            return used
        if used >= self.limit:
            raise QuotaExceeded(
                f"Daily limit reached: {self.limit} workouts per 24 hours. Please try again later."
            )
        return used
