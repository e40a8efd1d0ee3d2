"""Raster Surface Component.

A small canvas-style drawing surface on top of Pillow: rectangles, paths made
of straight and quadratic segments, and anchored text. One surface is owned by
a single render and repainted for every frame.
"""

import logging
import os
from functools import lru_cache
from typing import List, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont

from my_config import get_config

logger = logging.getLogger(__name__)

# Number of straight segments used to approximate one quadratic curve
CURVE_SEGMENTS = 8

_H_ANCHORS = {'left': 'l', 'start': 'l', 'center': 'm', 'right': 'r', 'end': 'r'}
_V_ANCHORS = {'top': 't', 'middle': 'm', 'bottom': 'b', 'alphabetic': 's'}

Point = Tuple[float, float]


@lru_cache(maxsize=64)
def load_font(size: int, font_path: Optional[str] = None) -> ImageFont.FreeTypeFont:
    """Load a bold sans-serif TrueType font at the given pixel size.

    Tries the configured font first, then common system fonts, then Pillow's
    bundled default.
    """
    size = max(1, int(size))
    home_dir = os.path.expanduser("~")
    font_paths = [
        font_path or get_config().countdown_font_path,
        f"{home_dir}/.fonts/Roboto-Bold.ttf",
        "/usr/share/fonts/truetype/msttcorefonts/Arial_Bold.ttf",
        "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
        "/System/Library/Fonts/Helvetica.ttc",
        "Arial Bold.ttf",
    ]

    for path in font_paths:
        if not path:
            continue
        try:
            font = ImageFont.truetype(path, size)
            logger.debug(f"Loaded font: {path} ({size}px)")
            return font
        except (OSError, IOError):
            continue

    logger.warning("No TrueType fonts found, using default font")
    return ImageFont.load_default(size=size)


class RasterSurface:
    """Canvas-like 2D drawing surface backed by a Pillow RGB image."""

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.image = Image.new('RGB', (self.width, self.height))
        self._draw = ImageDraw.Draw(self.image)

        self.fill_style = '#000000'
        self.stroke_style = '#000000'
        self.line_width = 1
        self.font = load_font(10)
        self.text_align = 'left'
        self.text_baseline = 'alphabetic'

        self._subpaths: List[List[Point]] = []
        self._closed: List[bool] = []

    @staticmethod
    def _rgb(color: str) -> Tuple[int, int, int]:
        return ImageColor.getrgb(color)[:3]

    def fill_rect(self, x: float, y: float, width: float, height: float):
        self._draw.rectangle(
            [x, y, x + width - 1, y + height - 1],
            fill=self._rgb(self.fill_style)
        )

    # Path construction

    def begin_path(self):
        self._subpaths = []
        self._closed = []

    def move_to(self, x: float, y: float):
        self._subpaths.append([(x, y)])
        self._closed.append(False)

    def line_to(self, x: float, y: float):
        if not self._subpaths:
            self.move_to(x, y)
            return
        self._subpaths[-1].append((x, y))

    def quadratic_curve_to(self, cpx: float, cpy: float, x: float, y: float):
        if not self._subpaths:
            self.move_to(cpx, cpy)
        x0, y0 = self._subpaths[-1][-1]
        for step in range(1, CURVE_SEGMENTS + 1):
            t = step / CURVE_SEGMENTS
            mt = 1 - t
            self._subpaths[-1].append((
                mt * mt * x0 + 2 * mt * t * cpx + t * t * x,
                mt * mt * y0 + 2 * mt * t * cpy + t * t * y,
            ))

    def close_path(self):
        if not self._subpaths:
            return
        self._closed[-1] = True
        start = self._subpaths[-1][0]
        # A new subpath begins at the start of the closed one
        self._subpaths.append([start])
        self._closed.append(False)

    def fill(self):
        color = self._rgb(self.fill_style)
        for points in self._subpaths:
            if len(points) >= 3:
                self._draw.polygon(points, fill=color)

    def stroke(self):
        color = self._rgb(self.stroke_style)
        width = max(1, int(round(self.line_width)))
        for points, closed in zip(self._subpaths, self._closed):
            if len(points) < 2:
                continue
            line = points + [points[0]] if closed else points
            self._draw.line(line, fill=color, width=width, joint='curve')

    # Text

    def fill_text(self, text: str, x: float, y: float):
        anchor = _H_ANCHORS.get(self.text_align, 'l') + _V_ANCHORS.get(self.text_baseline, 's')
        self._draw.text((x, y), text, fill=self._rgb(self.fill_style), font=self.font, anchor=anchor)

    def get_pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        return self.image.getpixel((x, y))
