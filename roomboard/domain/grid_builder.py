"""Mapping of calendar intervals onto the discrete availability grid.

The visible window starts at the current hour and spans ``rows`` hours, each
split into ``columns`` slots. Bucket indices are computed from wall-clock
hours counted from the epoch (see ``absolute_hour``) so the math is stable
across day rollover and DST changes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from roomboard.calendar.models import Interval
from roomboard.core.timezone_utils import (
    absolute_hour,
    now_utc,
    reanchor,
    resolve_override_timezone,
    resolve_timezone,
)
from roomboard.domain.models import Row, TimeGrid

logger = logging.getLogger(__name__)

DEFAULT_ROWS = 4
DEFAULT_COLUMNS = 12
DATE_FORMAT = "%d.%m.%Y"


def window_start_for(reference_time: datetime, target_tz: tzinfo, override_tz: tzinfo) -> datetime:
    """Start of the visible window.

    The current hour on the target zone's wall clock, read as a time in the
    override zone. Calendar expansion and bucketing must share this anchor.
    """
    hour = reference_time.astimezone(target_tz).replace(minute=0, second=0, microsecond=0)
    return reanchor(hour, override_tz)


def bucket_index(instant: datetime, window_start: datetime, columns: int) -> int:
    """Slot index of ``instant`` relative to the window, in the window's timezone.

    Negative for instants before the window; the minute part truncates, so
    an instant exactly on a slot boundary maps to the slot starting there.
    """
    local = instant.astimezone(window_start.tzinfo)
    hour_offset = absolute_hour(local) - absolute_hour(window_start)
    return hour_offset * columns + (local.minute * columns) // 60


def occupancy(
    intervals: Iterable[Interval],
    window_start: datetime,
    rows: int,
    columns: int,
) -> list[list[bool]]:
    """Union of all intervals over a ``rows`` x ``columns`` grid.

    Each interval marks the half-open slot range ``[start, end)``; starts
    before the window clamp to slot 0 and slots beyond the grid are dropped.
    """
    total = rows * columns
    # UTC bounds: same-zone comparisons ignore fold inside a repeated hour.
    window_utc = window_start.astimezone(timezone.utc)
    window_end = window_utc + timedelta(hours=rows + 1)
    flat = [False] * total

    for interval in intervals:
        if interval.is_empty or not interval.overlaps(window_utc, window_end):
            continue
        first = max(bucket_index(interval.start, window_start, columns), 0)
        last = min(bucket_index(interval.end, window_start, columns), total)
        for b in range(first, last):
            flat[b] = True

    return [flat[i * columns : (i + 1) * columns] for i in range(rows)]


def build_grid(
    events: Iterable[Interval],
    target_timezone: str,
    override_timezone: Optional[str] = None,
    room_name: str = "",
    reference_time: Optional[datetime] = None,
    rows: int = DEFAULT_ROWS,
    columns: int = DEFAULT_COLUMNS,
) -> TimeGrid:
    """Build the availability grid for one display.

    Args:
        events: Busy intervals; may be empty, outside the window, or degenerate
        target_timezone: Timezone for row labels and the wall-clock anchor
        override_timezone: Timezone for bucket math; invalid or unset falls
            back to ``target_timezone``
        room_name: Display name for the header
        reference_time: "Now"; defaults to the current time
        rows: Number of hourly rows
        columns: Slots per row

    Returns:
        Immutable TimeGrid

    Raises:
        TimezoneConfigError: If ``target_timezone`` is invalid
    """
    if rows <= 0 or columns <= 0:
        raise ValueError(f"Grid shape must be positive, got {rows}x{columns}")

    ttz = resolve_timezone(target_timezone)
    otz = resolve_override_timezone(override_timezone, ttz)

    now = (reference_time or now_utc()).astimezone(ttz)
    label_anchor = now.replace(minute=0, second=0, microsecond=0)

    window_start = window_start_for(now, ttz, otz)
    now_for_block = reanchor(now.replace(microsecond=0), otz).astimezone(timezone.utc)

    intervals = list(events)
    currently_occupied = any(
        not interval.is_empty and interval.contains(now_for_block) for interval in intervals
    )
    cells = occupancy(intervals, window_start, rows, columns)

    grid_rows = tuple(
        Row(
            label=f"{(label_anchor.hour + i) % 24:02d}:00",
            cells=tuple(cells[i]),
        )
        for i in range(rows)
    )

    logger.debug(
        "Built %dx%d grid for %r from %d intervals (occupied now: %s)",
        rows,
        columns,
        room_name,
        len(intervals),
        currently_occupied,
    )
    return TimeGrid(
        rows=grid_rows,
        columns_per_row=columns,
        currently_occupied=currently_occupied,
        display_name=room_name,
        display_date=now.strftime(DATE_FORMAT),
    )
