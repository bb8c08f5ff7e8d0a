"""Data models for calendar feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class Interval:
    """One busy period from the calendar, as a pair of aware instants."""

    start: datetime
    end: datetime

    @property
    def is_empty(self) -> bool:
        """Zero-length and inverted intervals occupy nothing."""
        return self.end.astimezone(timezone.utc) <= self.start.astimezone(timezone.utc)

    def overlaps(self, window_start: datetime, window_end: datetime) -> bool:
        """True if the interval intersects ``[window_start, window_end)``."""
        return self.start < window_end and self.end > window_start

    def contains(self, instant: datetime) -> bool:
        """Strict containment: an interval starting or ending at ``instant`` does not count."""
        return self.start < instant < self.end


@dataclass(frozen=True)
class CalendarFeed:
    """Result of parsing a calendar feed.

    ``name`` and ``description`` come from X-WR-CALNAME / X-WR-CALDESC and are
    only used for diagnostics.
    """

    intervals: tuple[Interval, ...] = field(default_factory=tuple)
    name: Optional[str] = None
    description: Optional[str] = None
