"""Font faces used by the renderer.

Fonts are loaded once at startup and shared read-only by all requests. A
face that cannot be loaded is fatal: the server refuses to start rather
than render with the wrong metrics.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from typing import Literal

from PIL import ImageFont

from roomboard.core.exceptions import FontLoadError

logger = logging.getLogger(__name__)

FontFace = Callable[[int], ImageFont.FreeTypeFont]
Weight = Literal["regular", "bold"]

_PROBE_SIZE = 12


@dataclass(frozen=True)
class FontSet:
    """Regular and bold faces, each a size -> font factory."""

    regular: FontFace
    bold: FontFace

    def sized(self, weight: Weight, size: int) -> ImageFont.FreeTypeFont:
        face = self.bold if weight == "bold" else self.regular
        return face(size)


def _face_from_bytes(data: bytes) -> FontFace:
    @lru_cache(maxsize=16)
    def face(size: int) -> ImageFont.FreeTypeFont:
        return ImageFont.truetype(BytesIO(data), size)

    return face


def load_face(path: str) -> FontFace:
    """Read a TrueType/OpenType file and verify FreeType can use it.

    Raises:
        FontLoadError: If the file is missing or not a usable font
    """
    try:
        data = Path(path).read_bytes()
        face = _face_from_bytes(data)
        face(_PROBE_SIZE)
    except OSError as e:
        raise FontLoadError(path, f"Failed to load font {path}: {e}") from e
    logger.debug("Loaded font %s (%d bytes)", path, len(data))
    return face


def load_fonts(regular_path: str, bold_path: str) -> FontSet:
    """Load the regular and bold faces.

    Raises:
        FontLoadError: If either face cannot be loaded
    """
    fonts = FontSet(regular=load_face(regular_path), bold=load_face(bold_path))
    logger.info("Fonts loaded: regular=%s bold=%s", regular_path, bold_path)
    return fonts
