"""Small builders shared by roomboard tests."""

from datetime import datetime, timezone

from roomboard.calendar.models import Interval


def utc(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)


def interval(start: datetime, end: datetime) -> Interval:
    return Interval(start=start, end=end)


class FakeFetcher:
    """Stands in for CalendarFetcher; returns canned content or raises."""

    def __init__(self, content: bytes = b"", error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.content
