"""Request pipeline: schedule source -> grid -> bitmap."""

from __future__ import annotations

import asyncio
import contextvars
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Optional

from roomboard.calendar.fetcher import CalendarFetcher
from roomboard.core.config_manager import DisplayConfig
from roomboard.core.exceptions import CalendarSourceError
from roomboard.core.timezone_utils import now_utc
from roomboard.domain.grid_builder import DEFAULT_COLUMNS, DEFAULT_ROWS
from roomboard.domain.models import TimeGrid
from roomboard.domain.schedule_source import SyntheticSource, select_source
from roomboard.rendering.grid_renderer import GridRenderer

logger = logging.getLogger(__name__)


class GridPipeline:
    """Builds and renders one display image per call.

    Calendar failures fall back to the synthetic grid; a bad target
    timezone (``TimezoneConfigError``) propagates to the caller.
    """

    def __init__(
        self,
        renderer: GridRenderer,
        fetcher: CalendarFetcher,
        rows: int = DEFAULT_ROWS,
        columns: int = DEFAULT_COLUMNS,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.renderer = renderer
        self.fetcher = fetcher
        self.rows = rows
        self.columns = columns
        self.clock = clock

    async def build_grid(self, display: Optional[DisplayConfig]) -> TimeGrid:
        reference_time = self.clock()
        source = select_source(display, self.fetcher, self.rows, self.columns)
        try:
            return await source.load_grid(reference_time)
        except CalendarSourceError as e:
            logger.warning(
                "Calendar for display %s unavailable, using synthetic grid: %s",
                display.display_id if display else "-",
                e,
            )
            return await SyntheticSource(self.rows, self.columns).load_grid(reference_time)

    async def render(self, display: Optional[DisplayConfig]) -> bytes:
        grid = await self.build_grid(display)
        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        return await loop.run_in_executor(None, ctx.run, self.renderer.render_bmp, grid)
