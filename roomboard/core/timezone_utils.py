"""Timezone resolution and wall-clock hour arithmetic."""

from __future__ import annotations

import datetime
import logging
import zoneinfo
from functools import lru_cache
from typing import Optional

from roomboard.core.exceptions import TimezoneConfigError

logger = logging.getLogger(__name__)

_EPOCH = datetime.datetime(1970, 1, 1)


@lru_cache(maxsize=64)
def _load_zone(name: str) -> zoneinfo.ZoneInfo:
    return zoneinfo.ZoneInfo(name)


def resolve_timezone(name: str) -> zoneinfo.ZoneInfo:
    """Resolve an IANA timezone name.

    Args:
        name: IANA timezone identifier (e.g. "Europe/Zurich")

    Returns:
        ZoneInfo for the name

    Raises:
        TimezoneConfigError: If the name is empty or unknown
    """
    if not name or not name.strip():
        raise TimezoneConfigError(name or "", "Timezone name is empty")
    try:
        return _load_zone(name.strip())
    except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
        raise TimezoneConfigError(name) from e


def resolve_override_timezone(
    name: Optional[str], fallback: zoneinfo.ZoneInfo
) -> zoneinfo.ZoneInfo:
    """Resolve the override timezone, substituting ``fallback`` when unusable."""
    if not name:
        return fallback
    try:
        return resolve_timezone(name)
    except TimezoneConfigError:
        logger.warning("Invalid override timezone %r, using %s", name, fallback.key)
        return fallback


def now_utc() -> datetime.datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.datetime.now(datetime.timezone.utc)


def reanchor(dt: datetime.datetime, tz: zoneinfo.ZoneInfo) -> datetime.datetime:
    """Keep the wall-clock fields of ``dt`` and attach ``tz`` to them.

    ``fold`` is kept, so the second pass through a repeated hour stays the
    second pass when both zones share the transition.
    """
    return dt.replace(tzinfo=tz)


def absolute_hour(dt: datetime.datetime) -> int:
    """Count of whole hours from the epoch to the wall-clock fields of ``dt``.

    The wall clock is read as if it were UTC, so the result is stable across
    DST transitions and day rollovers.
    """
    naive = dt.replace(tzinfo=None, minute=0, second=0, microsecond=0)
    return int((naive - _EPOCH).total_seconds()) // 3600

