"""Rasterization of availability grids."""

from .fonts import FontSet, load_fonts
from .grid_renderer import GridLayout, GridRenderer, RenderStyle, encode_bmp

__all__ = ["FontSet", "GridLayout", "GridRenderer", "RenderStyle", "encode_bmp", "load_fonts"]
