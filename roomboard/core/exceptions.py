"""Exception hierarchy for roomboard.

Errors are grouped by how the request pipeline treats them:

- ``ConfigurationError`` subclasses are fatal for the request (HTTP 500).
- ``CalendarSourceError`` subclasses are recovered by falling back to the
  synthetic grid so the display stays usable.
- ``FontLoadError`` is fatal at process startup and never raised per request.
"""

from typing import Optional


class RoomboardError(Exception):
    """Base exception for all roomboard errors."""


class ConfigurationError(RoomboardError):
    """Display or server configuration is unusable."""


class TimezoneConfigError(ConfigurationError):
    """A configured timezone name could not be resolved.

    Raised for the target (label) timezone only; an invalid override
    timezone is substituted instead.
    """

    def __init__(self, timezone_name: str, message: Optional[str] = None):
        super().__init__(message or f"Unknown timezone: {timezone_name!r}")
        self.timezone_name = timezone_name


class CalendarSourceError(RoomboardError):
    """Base exception for calendar fetch and parse failures."""


class CalendarFetchError(CalendarSourceError):
    """Calendar feed could not be downloaded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CalendarTimeoutError(CalendarFetchError):
    """Calendar download exceeded the request timeout."""


class CalendarParseError(CalendarSourceError):
    """Downloaded content is not valid iCalendar data."""


class FontLoadError(RoomboardError):
    """A required font face could not be loaded."""

    def __init__(self, path: str, message: Optional[str] = None):
        super().__init__(message or f"Failed to load font: {path}")
        self.path = path
