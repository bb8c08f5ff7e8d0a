"""Seeded random schedules shown when a display has no live calendar."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from roomboard.core.timezone_utils import now_utc
from roomboard.domain.models import Row, TimeGrid

SYNTHETIC_ROOM_NAME = "Random Room"
SYNTHETIC_DATE_FORMAT = "%Y-%m-%d"
FLIP_THRESHOLD = 0.95


def generate_occupancy(seed: int, rows: int, columns: int) -> tuple[bool, list[list[bool]]]:
    """Random walk over the grid cells.

    Starts busy or free with equal odds, then flips state before each cell
    (row-major) with 5% probability. Same seed and shape, same result.

    Returns:
        (initial "occupied now" state, rows x columns occupancy)
    """
    rng = random.Random(seed)
    currently_occupied = rng.random() > 0.5
    blocked = currently_occupied
    cells: list[list[bool]] = []
    for _ in range(rows):
        row: list[bool] = []
        for _ in range(columns):
            if rng.random() > FLIP_THRESHOLD:
                blocked = not blocked
            row.append(blocked)
        cells.append(row)
    return currently_occupied, cells


def build_synthetic_grid(
    seed: int,
    reference_time: Optional[datetime] = None,
    rows: int = 4,
    columns: int = 12,
) -> TimeGrid:
    """Wrap ``generate_occupancy`` into a displayable grid."""
    now = reference_time or now_utc()
    currently_occupied, cells = generate_occupancy(seed, rows, columns)
    return TimeGrid(
        rows=tuple(
            Row(label=f"{(now.hour + i) % 24:02d}:00", cells=tuple(cells[i]))
            for i in range(rows)
        ),
        columns_per_row=columns,
        currently_occupied=currently_occupied,
        display_name=SYNTHETIC_ROOM_NAME,
        display_date=now.strftime(SYNTHETIC_DATE_FORMAT),
    )
