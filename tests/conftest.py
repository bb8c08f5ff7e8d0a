"""Shared fixtures for roomboard tests."""

from collections.abc import Generator
from datetime import datetime
from typing import Any

import pytest
from PIL import ImageFont

from roomboard.rendering.fonts import FontSet
from tests.helpers import utc


@pytest.fixture
def fonts() -> FontSet:
    """Bundled Pillow font for both faces; avoids depending on system fonts."""

    def face(size: int) -> ImageFont.FreeTypeFont:
        return ImageFont.load_default(size=size)

    return FontSet(regular=face, bold=face)


@pytest.fixture
def reference_time() -> datetime:
    """Fixed "now": Monday 2024-01-15 10:20:30 UTC."""
    return utc(2024, 1, 15, 10, 20, 30)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: Any) -> Generator[None, Any, None]:
    """Drop roomboard and display variables so host settings cannot leak in."""
    import os

    for key in list(os.environ):
        if key.startswith(("ROOMBOARD_", "DISPLAY_")) or key == "PORT":
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def sample_ics() -> bytes:
    """Three back-to-back one-hour meetings from 10:00 UTC on 2024-01-15."""
    return b"""BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Roomboard Test//EN
X-WR-CALNAME:Meeting Room 1
X-WR-CALDESC:Ground floor
BEGIN:VEVENT
UID:standup@roomboard.test
DTSTART:20240115T100000Z
DTEND:20240115T110000Z
SUMMARY:Standup
END:VEVENT
BEGIN:VEVENT
UID:planning@roomboard.test
DTSTART:20240115T110000Z
DTEND:20240115T120000Z
SUMMARY:Planning
END:VEVENT
BEGIN:VEVENT
UID:review@roomboard.test
DTSTART:20240115T120000Z
DTEND:20240115T130000Z
SUMMARY:Review
END:VEVENT
END:VCALENDAR
"""
