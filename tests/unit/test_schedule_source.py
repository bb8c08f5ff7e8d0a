"""Unit tests for schedule sources and the request pipeline."""

import pytest

from roomboard.api.middleware.request_logging import get_request_id, request_id_var
from roomboard.core.config_manager import DisplayConfig
from roomboard.core.exceptions import CalendarFetchError, TimezoneConfigError
from roomboard.domain import schedule_source
from roomboard.domain.grid_builder import build_grid
from roomboard.domain.pipeline import GridPipeline
from roomboard.domain.schedule_source import (
    LiveCalendarSource,
    SyntheticSource,
    select_source,
)
from roomboard.domain.synthetic import SYNTHETIC_ROOM_NAME, build_synthetic_grid
from roomboard.rendering import GridRenderer
from tests.helpers import FakeFetcher, utc

pytestmark = pytest.mark.unit

FEED_URL = "https://calendar.example.com/room1.ics"


def display(timezone="UTC", override_timezone=None) -> DisplayConfig:
    return DisplayConfig(
        display_id="ROOM1",
        name="Room One",
        url=FEED_URL,
        timezone=timezone,
        override_timezone=override_timezone,
    )


class TestSelectSource:
    def test_unconfigured_display_is_synthetic(self):
        assert isinstance(select_source(None, FakeFetcher()), SyntheticSource)

    def test_configured_display_is_live(self):
        source = select_source(display(), FakeFetcher(), rows=3, columns=6)

        assert isinstance(source, LiveCalendarSource)
        assert (source.rows, source.columns) == (3, 6)


class TestLiveCalendarSource:
    @pytest.mark.asyncio
    async def test_builds_grid_from_feed(self, sample_ics, reference_time):
        fetcher = FakeFetcher(sample_ics)

        grid = await LiveCalendarSource(display(), fetcher).load_grid(reference_time)

        assert fetcher.calls == [FEED_URL]
        assert grid.display_name == "Room One"
        assert grid.currently_occupied is True
        assert [all(row.cells) for row in grid.rows] == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_invalid_timezone_fails_before_fetch(self, sample_ics, reference_time):
        fetcher = FakeFetcher(sample_ics)

        with pytest.raises(TimezoneConfigError):
            await LiveCalendarSource(display("Not/AZone"), fetcher).load_grid(reference_time)

        assert fetcher.calls == []

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self, reference_time):
        fetcher = FakeFetcher(error=CalendarFetchError("HTTP 503", status_code=503))

        with pytest.raises(CalendarFetchError):
            await LiveCalendarSource(display(), fetcher).load_grid(reference_time)

    @pytest.mark.asyncio
    async def test_recurring_event_follows_override_timezone(self):
        # 10:00 UTC labels read as New York time put the window at 15:00-19:00 UTC.
        reference = utc(2024, 1, 16, 10, 20)
        recurring = (
            b"BEGIN:VCALENDAR\nVERSION:2.0\nPRODID:-//Roomboard Test//EN\n"
            b"BEGIN:VEVENT\nUID:daily@roomboard.test\n"
            b"DTSTART:20240110T170000Z\nDTEND:20240110T180000Z\n"
            b"RRULE:FREQ=DAILY\nEND:VEVENT\nEND:VCALENDAR\n"
        )
        single = recurring.replace(b"RRULE:FREQ=DAILY\n", b"").replace(b"20240110", b"20240116")
        config = display("UTC", "America/New_York")

        from_rule = await LiveCalendarSource(config, FakeFetcher(recurring)).load_grid(reference)
        from_single = await LiveCalendarSource(config, FakeFetcher(single)).load_grid(reference)

        assert [sum(row.cells) for row in from_rule.rows] == [0, 0, 12, 0]
        assert from_rule.rows == from_single.rows

    @pytest.mark.asyncio
    async def test_request_id_reaches_builder_thread(self, sample_ics, reference_time, monkeypatch):
        seen = []

        def recording_build_grid(*args, **kwargs):
            seen.append(get_request_id())
            return build_grid(*args, **kwargs)

        monkeypatch.setattr(schedule_source, "build_grid", recording_build_grid)
        token = request_id_var.set("req-42")
        try:
            await LiveCalendarSource(display(), FakeFetcher(sample_ics)).load_grid(reference_time)
        finally:
            request_id_var.reset(token)

        assert seen == ["req-42"]


class TestSyntheticSource:
    @pytest.mark.asyncio
    async def test_seed_defaults_to_minute(self, reference_time):
        grid = await SyntheticSource().load_grid(reference_time)

        local = reference_time.astimezone()
        assert grid == build_synthetic_grid(local.minute, local)

    @pytest.mark.asyncio
    async def test_explicit_seed(self, reference_time):
        first = await SyntheticSource(seed=9).load_grid(reference_time)
        second = await SyntheticSource(seed=9).load_grid(reference_time)

        assert first == second
        assert first.display_name == SYNTHETIC_ROOM_NAME


class TestGridPipeline:
    @pytest.fixture
    def make_pipeline(self, fonts, reference_time):
        def factory(fetcher):
            return GridPipeline(GridRenderer(fonts), fetcher, clock=lambda: reference_time)

        return factory

    @pytest.mark.asyncio
    async def test_live_grid(self, make_pipeline, sample_ics):
        grid = await make_pipeline(FakeFetcher(sample_ics)).build_grid(display())

        assert grid.display_name == "Room One"

    @pytest.mark.asyncio
    async def test_fetch_failure_falls_back_to_synthetic(self, make_pipeline, caplog):
        pipeline = make_pipeline(FakeFetcher(error=CalendarFetchError("boom")))

        with caplog.at_level("WARNING", logger="roomboard.domain.pipeline"):
            grid = await pipeline.build_grid(display())

        assert grid.display_name == SYNTHETIC_ROOM_NAME
        assert "using synthetic grid" in caplog.text

    @pytest.mark.asyncio
    async def test_parse_failure_falls_back_to_synthetic(self, make_pipeline):
        grid = await make_pipeline(FakeFetcher(b"garbage")).build_grid(display())

        assert grid.display_name == SYNTHETIC_ROOM_NAME

    @pytest.mark.asyncio
    async def test_invalid_timezone_propagates(self, make_pipeline, sample_ics):
        with pytest.raises(TimezoneConfigError):
            await make_pipeline(FakeFetcher(sample_ics)).build_grid(display("Bad/Zone"))

    @pytest.mark.asyncio
    async def test_render_returns_bitmap(self, make_pipeline):
        body = await make_pipeline(FakeFetcher()).render(None)

        assert body[:2] == b"BM"

    @pytest.mark.asyncio
    async def test_request_id_reaches_render_thread(self, fonts, reference_time):
        seen = []

        class RecordingRenderer(GridRenderer):
            def render_bmp(self, grid):
                seen.append(get_request_id())
                return super().render_bmp(grid)

        pipeline = GridPipeline(RecordingRenderer(fonts), FakeFetcher(), clock=lambda: reference_time)
        token = request_id_var.set("req-7")
        try:
            await pipeline.render(None)
        finally:
            request_id_var.reset(token)

        assert seen == ["req-7"]
