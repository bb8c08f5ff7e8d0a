"""iCalendar parsing into busy intervals.

Recurring events are expanded here so that the grid builder only ever sees
concrete intervals. Expansion is bounded to the requested window and to
``MAX_RECURRENCES`` occurrences per event.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional, Union

from dateutil.rrule import rrulestr
from icalendar import Calendar

from roomboard.calendar.models import CalendarFeed, Interval
from roomboard.core.exceptions import CalendarParseError

logger = logging.getLogger(__name__)

MAX_RECURRENCES = 100

_DateLike = Union[date, datetime]

# Broken property values surface as ValueError (BrokenCalendarProperty) or,
# on older icalendar releases, AttributeError when ``.dt`` is read.
_BROKEN_EVENT_ERRORS = (ValueError, TypeError, AttributeError)


def _to_datetime(value: _DateLike, default_tz: tzinfo) -> datetime:
    """Normalize an iCalendar DATE or DATE-TIME value to an aware datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=default_tz)
        return value
    return datetime.combine(value, time.min, tzinfo=default_tz)


def _utc_key(dt: datetime) -> datetime:
    return dt.astimezone(timezone.utc)


def _event_bounds(component: Any, default_tz: tzinfo) -> Optional[tuple[datetime, timedelta]]:
    """Return (start, duration) of a VEVENT, or None when it has no DTSTART."""
    dtstart = component.get("DTSTART")
    if dtstart is None:
        return None

    raw_start = dtstart.dt
    start = _to_datetime(raw_start, default_tz)
    all_day = not isinstance(raw_start, datetime)

    dtend = component.get("DTEND")
    duration = component.get("DURATION")
    if dtend is not None:
        end = _to_datetime(dtend.dt, default_tz)
        return start, end - start
    if duration is not None:
        return start, duration.dt
    return start, timedelta(days=1) if all_day else timedelta(0)


def _collect_exdates(component: Any, default_tz: tzinfo) -> set[datetime]:
    exdates: set[datetime] = set()
    raw = component.get("EXDATE")
    if raw is None:
        return exdates
    for entry in raw if isinstance(raw, list) else [raw]:
        for item in getattr(entry, "dts", []):
            exdates.add(_utc_key(_to_datetime(item.dt, default_tz)))
    return exdates


def _expand_rrule(
    start: datetime,
    duration: timedelta,
    rule_text: str,
    exdates: set[datetime],
    expand_start: datetime,
    expand_end: datetime,
) -> list[datetime]:
    """Occurrence starts of a recurring event overlapping the expansion window."""
    tz = start.tzinfo
    search_from = expand_start - duration
    try:
        rule = rrulestr(rule_text, dtstart=start)
    except ValueError:
        # Floating UNTIL with an aware DTSTART: expand on the local wall clock.
        rule = rrulestr(rule_text, dtstart=start.replace(tzinfo=None))
        search_from = search_from.astimezone(tz).replace(tzinfo=None)

    occurrences: list[datetime] = []
    for occurrence in rule.xafter(search_from, count=MAX_RECURRENCES, inc=True):
        if occurrence.tzinfo is None:
            occurrence = occurrence.replace(tzinfo=tz)
        if occurrence >= expand_end:
            break
        if _utc_key(occurrence) not in exdates:
            occurrences.append(occurrence)
    return occurrences


def _event_intervals(
    component: Any,
    default_tz: tzinfo,
    overridden: set[tuple[str, datetime]],
    expand_start: datetime,
    expand_end: datetime,
) -> list[Interval]:
    """Intervals contributed by one VEVENT (none for cancelled or start-less events)."""
    if str(component.get("STATUS", "")).upper() == "CANCELLED":
        return []

    bounds = _event_bounds(component, default_tz)
    if bounds is None:
        logger.debug("Skipping VEVENT without DTSTART (uid=%s)", component.get("UID"))
        return []
    start, duration = bounds

    rrule = component.get("RRULE")
    if rrule is None or component.get("RECURRENCE-ID") is not None:
        return [Interval(start, start + duration)]

    uid = str(component.get("UID", ""))
    rule_text = rrule.to_ical().decode("utf-8")
    try:
        starts = _expand_rrule(
            start,
            duration,
            rule_text,
            _collect_exdates(component, default_tz),
            expand_start,
            expand_end,
        )
    except (ValueError, TypeError) as e:
        logger.warning("Could not expand RRULE %r (uid=%s): %s", rule_text, uid, e)
        return [Interval(start, start + duration)]

    return [
        Interval(occurrence, occurrence + duration)
        for occurrence in starts
        if (uid, _utc_key(occurrence)) not in overridden
    ]


def parse_ics(
    content: Union[bytes, str],
    default_tz: tzinfo,
    expand_start: datetime,
    expand_end: datetime,
) -> CalendarFeed:
    """Parse iCalendar content into busy intervals.

    Args:
        content: Raw ICS data
        default_tz: Timezone applied to floating times and all-day dates
        expand_start: Start of the window recurring events are expanded for
        expand_end: End of that window

    Returns:
        CalendarFeed with one interval per (occurrence of an) event

    Raises:
        CalendarParseError: If the content is not an iCalendar document
    """
    try:
        calendar = Calendar.from_ical(content)
    except (ValueError, IndexError, KeyError) as e:
        raise CalendarParseError(f"Invalid iCalendar content: {e}") from e
    if getattr(calendar, "name", None) != "VCALENDAR":
        raise CalendarParseError("Content is not a VCALENDAR")

    name = calendar.get("X-WR-CALNAME")
    description = calendar.get("X-WR-CALDESC")

    events = list(calendar.walk("VEVENT"))

    overridden: set[tuple[str, datetime]] = set()
    for component in events:
        recurrence_id = component.get("RECURRENCE-ID")
        if recurrence_id is None:
            continue
        uid = str(component.get("UID", ""))
        try:
            overridden.add((uid, _utc_key(_to_datetime(recurrence_id.dt, default_tz))))
        except _BROKEN_EVENT_ERRORS as e:
            logger.warning("Ignoring broken RECURRENCE-ID (uid=%s): %s", uid, e)

    intervals: list[Interval] = []
    for component in events:
        try:
            intervals.extend(
                _event_intervals(component, default_tz, overridden, expand_start, expand_end)
            )
        except _BROKEN_EVENT_ERRORS as e:
            logger.warning("Skipping malformed VEVENT (uid=%s): %s", component.get("UID"), e)

    logger.debug("Parsed %d intervals from %d VEVENTs", len(intervals), len(events))
    return CalendarFeed(
        intervals=tuple(intervals),
        name=str(name) if name is not None else None,
        description=str(description) if description is not None else None,
    )
