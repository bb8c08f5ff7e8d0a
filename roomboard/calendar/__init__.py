"""Calendar source collaborator: feed download and iCalendar parsing."""

from .models import CalendarFeed, Interval

__all__ = ["CalendarFeed", "Interval"]
