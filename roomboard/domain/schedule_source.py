"""Schedule sources: where a display's grid comes from.

``LiveCalendarSource`` builds the grid from a configured calendar feed,
``SyntheticSource`` generates a seeded random one. ``select_source`` picks
between them by configuration presence.
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol

from roomboard.calendar.fetcher import CalendarFetcher
from roomboard.calendar.ics_parser import parse_ics
from roomboard.core.config_manager import DisplayConfig
from roomboard.core.timezone_utils import resolve_override_timezone, resolve_timezone
from roomboard.domain.grid_builder import (
    DEFAULT_COLUMNS,
    DEFAULT_ROWS,
    build_grid,
    window_start_for,
)
from roomboard.domain.models import TimeGrid
from roomboard.domain.synthetic import build_synthetic_grid

logger = logging.getLogger(__name__)


class ScheduleSource(Protocol):
    """Supplies the grid for one request."""

    async def load_grid(self, reference_time: datetime) -> TimeGrid: ...


class SyntheticSource:
    """Random schedule for unconfigured displays.

    Without an explicit seed the minute of the reference time is used, so the
    picture changes once a minute and is stable within it.
    """

    def __init__(
        self,
        rows: int = DEFAULT_ROWS,
        columns: int = DEFAULT_COLUMNS,
        seed: Optional[int] = None,
    ) -> None:
        self.rows = rows
        self.columns = columns
        self.seed = seed

    async def load_grid(self, reference_time: datetime) -> TimeGrid:
        local_time = reference_time.astimezone()
        seed = self.seed if self.seed is not None else local_time.minute
        return build_synthetic_grid(seed, local_time, self.rows, self.columns)


class LiveCalendarSource:
    """Grid built from a display's calendar feed."""

    def __init__(
        self,
        display: DisplayConfig,
        fetcher: CalendarFetcher,
        rows: int = DEFAULT_ROWS,
        columns: int = DEFAULT_COLUMNS,
    ) -> None:
        self.display = display
        self.fetcher = fetcher
        self.rows = rows
        self.columns = columns

    async def load_grid(self, reference_time: datetime) -> TimeGrid:
        """Fetch, parse and bucket the feed.

        Raises:
            TimezoneConfigError: The display's target timezone is invalid
            CalendarSourceError: The feed could not be fetched or parsed
        """
        # Fail on a bad timezone before spending a network round trip.
        resolve_timezone(self.display.timezone)

        content = await self.fetcher.fetch(self.display.url)
        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        return await loop.run_in_executor(None, ctx.run, self._build, content, reference_time)

    def _build(self, content: bytes, reference_time: datetime) -> TimeGrid:
        ttz = resolve_timezone(self.display.timezone)
        otz = resolve_override_timezone(self.display.override_timezone, ttz)
        window_start = window_start_for(reference_time, ttz, otz)
        feed = parse_ics(
            content,
            default_tz=ttz,
            expand_start=window_start - timedelta(hours=1),
            expand_end=window_start + timedelta(hours=self.rows + 2),
        )
        logger.info(
            "Display %s: feed %r (%s) with %d intervals",
            self.display.display_id,
            feed.name,
            feed.description,
            len(feed.intervals),
        )
        return build_grid(
            feed.intervals,
            target_timezone=self.display.timezone,
            override_timezone=self.display.override_timezone,
            room_name=self.display.name,
            reference_time=reference_time,
            rows=self.rows,
            columns=self.columns,
        )


def select_source(
    display: Optional[DisplayConfig],
    fetcher: CalendarFetcher,
    rows: int = DEFAULT_ROWS,
    columns: int = DEFAULT_COLUMNS,
) -> ScheduleSource:
    """Live source when the display is configured, synthetic otherwise."""
    if display is None:
        return SyntheticSource(rows, columns)
    return LiveCalendarSource(display, fetcher, rows, columns)
