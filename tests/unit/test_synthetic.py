"""Unit tests for the seeded fallback schedule."""

import pytest

from roomboard.domain.synthetic import (
    SYNTHETIC_ROOM_NAME,
    build_synthetic_grid,
    generate_occupancy,
)
from tests.helpers import utc

pytestmark = pytest.mark.unit


def test_same_seed_same_grid():
    assert generate_occupancy(42, 4, 12) == generate_occupancy(42, 4, 12)


def test_shape_matches_request():
    _, cells = generate_occupancy(1, 3, 24)

    assert len(cells) == 3
    assert all(len(row) == 24 for row in cells)


def test_different_seeds_usually_differ():
    results = {str(generate_occupancy(seed, 4, 12)) for seed in range(10)}

    assert len(results) > 1


def test_low_flip_rate_produces_long_runs():
    # With a 5% flip chance, 48 cells contain far fewer state changes than cells.
    for seed in range(20):
        _, cells = generate_occupancy(seed, 4, 12)
        flat = [cell for row in cells for cell in row]
        changes = sum(1 for a, b in zip(flat, flat[1:]) if a != b)
        assert changes < 20


def test_synthetic_grid_metadata():
    grid = build_synthetic_grid(7, reference_time=utc(2024, 1, 15, 22, 45))

    assert grid.display_name == SYNTHETIC_ROOM_NAME
    assert grid.display_date == "2024-01-15"
    assert [row.label for row in grid.rows] == ["22:00", "23:00", "00:00", "01:00"]
    assert grid.columns_per_row == 12


def test_synthetic_grid_uses_generated_cells():
    initial, cells = generate_occupancy(11, 4, 12)

    grid = build_synthetic_grid(11, reference_time=utc(2024, 1, 15, 10))

    assert grid.currently_occupied is initial
    assert [list(row.cells) for row in grid.rows] == cells
