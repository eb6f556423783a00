"""Daily greeting schedule."""

from datetime import date, datetime, time


class HeartbeatScheduler:
    """
    Decides when the once-a-day greeting is due.

    The greeting is due on the first check of a calendar day at or after
    `hello_time` (local wall-clock time), and at most once per day.
    """

    def __init__(self, hello_time: time, today: date | None = None):
        self.hello_time = hello_time
        self.last_greeted_day = today
        self.greeted_today = False

    def check(self, now: datetime | None = None) -> bool:
        """Return True if the greeting should be sent now."""
        now = now or datetime.now()
        today = now.date()

        if self.last_greeted_day is None or today > self.last_greeted_day:
            self.last_greeted_day = today
            self.greeted_today = False

        if not self.greeted_today and now.time() >= self.hello_time:
            self.greeted_today = True
            return True
        return False
