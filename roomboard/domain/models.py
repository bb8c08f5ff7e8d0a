"""Immutable availability grid handed from the builder to the renderer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Row:
    """One hour of the grid.

    Attributes:
        label: Starting wall-clock hour formatted ``HH:00``
        cells: Occupancy of each sub-hour slot, earliest first
    """

    label: str
    cells: tuple[bool, ...]


@dataclass(frozen=True)
class TimeGrid:
    """Fixed-shape occupancy grid for the next few hours of one room."""

    rows: tuple[Row, ...]
    columns_per_row: int
    currently_occupied: bool
    display_name: str
    display_date: str

    def __post_init__(self) -> None:
        for row in self.rows:
            if len(row.cells) != self.columns_per_row:
                raise ValueError(
                    f"Row {row.label!r} has {len(row.cells)} cells, "
                    f"expected {self.columns_per_row}"
                )

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def occupied_cells(self) -> list[tuple[int, int]]:
        """(row, column) pairs of every occupied cell in row-major order."""
        return [
            (i, j)
            for i, row in enumerate(self.rows)
            for j, occupied in enumerate(row.cells)
            if occupied
        ]
