"""Default clock for the allocation pool."""

from datetime import UTC, datetime

from .ports import ClockPort


class SystemClock(ClockPort):
    """Reads wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(UTC)
