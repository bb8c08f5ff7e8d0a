"""Availability grid domain: grid model, builders and schedule sources."""

from .grid_builder import build_grid
from .models import Row, TimeGrid
from .synthetic import build_synthetic_grid, generate_occupancy

__all__ = ["Row", "TimeGrid", "build_grid", "build_synthetic_grid", "generate_occupancy"]
