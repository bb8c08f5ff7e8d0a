"""PIL renderer turning a TimeGrid into the room display bitmap.

Layout (default 640x384 canvas):

- Header: room name and date at fixed baseline anchors, never measured or
  wrapped.
- Grid: hourly rows between ``top`` and ``top + rows * row_height``; the
  label column spans ``left..divider`` and the slot matrix ``divider..right``.
- Banner: solid alert bar under the grid while the room is occupied.

Colors and geometry are immutable configuration passed in at construction.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field

from PIL import Image, ImageDraw

from roomboard.domain.models import TimeGrid
from roomboard.rendering.fonts import FontSet

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class RenderStyle:
    """Colors and stroke widths."""

    background: RGB = (0xFF, 0xFF, 0xFF)
    foreground: RGB = (0x00, 0x00, 0x00)
    alert: RGB = (0xFF, 0x00, 0x00)
    line_width: int = 2
    frame_width: int = 1


@dataclass(frozen=True)
class GridLayout:
    """Fixed geometry of the display, in pixels."""

    width: int = 640
    height: int = 384
    left: float = 85.0
    right_margin: float = 85.0
    divider: float = 150.0
    top: float = 100.0
    row_height: float = 50.0
    cell_inset: float = 4.0
    corner_radius: int = 5
    name_anchor: tuple[float, float] = (85.0, 70.0)
    name_size: int = 30
    date_anchor: tuple[float, float] = (425.0, 60.0)
    date_size: int = 20
    label_size: int = 16
    label_offset: tuple[float, float] = (5.0, 17.0)
    tick_size: int = 13
    tick_labels: tuple[str, ...] = field(default=(":00", ":15", ":30", ":45"))
    tick_lift: float = 4.0
    banner_gap: float = 25.0
    banner_bottom: float = 50.0
    # Lines at the divider and right edge sit 2px outside the slot area.
    edge_nudge: float = 2.0

    @property
    def right(self) -> float:
        return self.width - self.right_margin

    def grid_bottom(self, rows: int) -> float:
        return self.top + self.row_height * rows

    def row_top(self, row: int) -> float:
        return self.top + self.row_height * row

    def column_width(self, columns: int) -> float:
        return (self.right - self.divider) / columns

    def cell_box(self, row: int, column: int, columns: int) -> tuple[int, int, int, int]:
        """Inset bounding box of one slot."""
        col_width = self.column_width(columns)
        x0 = round(self.divider + col_width * column + self.cell_inset)
        y0 = round(self.row_top(row) + self.cell_inset)
        x1 = round(self.divider + col_width * (column + 1) - self.cell_inset)
        y1 = round(self.row_top(row + 1) - self.cell_inset)
        # Narrow slots collapse to a single-pixel column instead of inverting.
        return x0, y0, max(x0, x1), max(y0, y1)

    def banner_box(self, rows: int) -> tuple[int, int, int, int]:
        bottom = self.grid_bottom(rows)
        return (
            round(self.left),
            round(bottom + self.banner_gap),
            round(self.right + self.edge_nudge),
            round(bottom + self.banner_bottom),
        )


class GridRenderer:
    """Renders availability grids; stateless apart from its configuration."""

    def __init__(
        self,
        fonts: FontSet,
        style: RenderStyle | None = None,
        layout: GridLayout | None = None,
    ) -> None:
        self.fonts = fonts
        self.style = style or RenderStyle()
        self.layout = layout or GridLayout()

    def render(self, grid: TimeGrid) -> Image.Image:
        """Draw the full display for ``grid``; never fails on grid content."""
        layout, style = self.layout, self.style

        image = Image.new("RGB", (layout.width, layout.height), style.background)
        draw = ImageDraw.Draw(image)
        draw.rectangle(
            (0, 0, layout.width - 1, layout.height - 1),
            outline=style.foreground,
            width=style.frame_width,
        )

        self._draw_header(draw, grid)
        if grid.currently_occupied:
            draw.rectangle(layout.banner_box(grid.row_count), fill=style.alert)
        self._draw_gridlines(draw, grid.row_count)
        self._draw_labels(draw, grid)
        self._draw_cells(draw, grid)

        logger.debug(
            "Rendered grid for %r: %d occupied cells, banner=%s",
            grid.display_name,
            len(grid.occupied_cells()),
            grid.currently_occupied,
        )
        return image

    def render_bmp(self, grid: TimeGrid) -> bytes:
        return encode_bmp(self.render(grid))

    def _draw_header(self, draw: ImageDraw.ImageDraw, grid: TimeGrid) -> None:
        layout = self.layout
        draw.text(
            layout.name_anchor,
            grid.display_name,
            font=self.fonts.sized("bold", layout.name_size),
            fill=self.style.foreground,
            anchor="ls",
        )
        draw.text(
            layout.date_anchor,
            grid.display_date,
            font=self.fonts.sized("bold", layout.date_size),
            fill=self.style.foreground,
            anchor="ls",
        )

    def _draw_gridlines(self, draw: ImageDraw.ImageDraw, rows: int) -> None:
        layout = self.layout
        color, width = self.style.foreground, self.style.line_width
        top, bottom = layout.top, layout.grid_bottom(rows)
        right_edge = layout.right + layout.edge_nudge

        for x in (layout.left, layout.divider - layout.edge_nudge, right_edge):
            draw.line([(x, top), (x, bottom)], fill=color, width=width)
        for i in range(rows + 1):
            y = layout.row_top(i)
            draw.line([(layout.left, y), (right_edge, y)], fill=color, width=width)

    def _draw_labels(self, draw: ImageDraw.ImageDraw, grid: TimeGrid) -> None:
        layout = self.layout
        label_font = self.fonts.sized("bold", layout.label_size)
        dx, dy = layout.label_offset
        for i, row in enumerate(grid.rows, start=1):
            draw.text(
                (layout.left + dx, layout.row_top(i) - dy),
                row.label,
                font=label_font,
                fill=self.style.foreground,
                anchor="ls",
            )

        # Tick density is decorative and independent of the slot count.
        tick_font = self.fonts.sized("bold", layout.tick_size)
        tick_width = (layout.right - layout.divider) / len(layout.tick_labels)
        for i, tick in enumerate(layout.tick_labels):
            draw.text(
                (layout.divider + tick_width * i, layout.top - layout.tick_lift),
                tick,
                font=tick_font,
                fill=self.style.foreground,
                anchor="ls",
            )

    def _draw_cells(self, draw: ImageDraw.ImageDraw, grid: TimeGrid) -> None:
        layout = self.layout
        for row, column in grid.occupied_cells():
            draw.rounded_rectangle(
                layout.cell_box(row, column, grid.columns_per_row),
                radius=layout.corner_radius,
                fill=self.style.foreground,
            )


def encode_bmp(image: Image.Image) -> bytes:
    """Encode an image as an uncompressed BMP."""
    buffer = io.BytesIO()
    image.save(buffer, format="BMP")
    return buffer.getvalue()
