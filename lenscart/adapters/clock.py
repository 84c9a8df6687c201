from datetime import UTC, datetime


class SystemClock:
    def now_utc(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Clock frozen at one instant, for tests and reproducible seeds."""

    def __init__(self, at: datetime):
        self.at = at

    def now_utc(self) -> datetime:
        return self.at
