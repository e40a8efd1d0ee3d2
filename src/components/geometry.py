"""Shape helpers for the countdown surface."""

from typing import Mapping, Union

DEFAULT_RADIUS = 5
CORNERS = ('tl', 'tr', 'br', 'bl')


def round_rect(surface, x, y, width, height, radius: Union[float, Mapping[str, float]] = DEFAULT_RADIUS,
               fill=True, stroke=True):
    """Draw a rectangle with rounded corners on a RasterSurface.

    Args:
        surface: RasterSurface to draw on (uses its current fill/stroke styles)
        x, y: Top-left corner
        width, height: Size of the rectangle
        radius: A single radius for all corners, or a mapping with any of
            'tl', 'tr', 'br', 'bl' (missing corners are square)
        fill: Fill the rectangle
        stroke: Outline the rectangle

    Returns:
        dict: The corner radii that were used
    """
    if radius is None:
        radius = DEFAULT_RADIUS
    if isinstance(radius, (int, float)):
        radii = {corner: radius for corner in CORNERS}
    else:
        radii = {corner: radius.get(corner) or 0 for corner in CORNERS}

    surface.begin_path()
    surface.move_to(x + radii['tl'], y)
    surface.line_to(x + width - radii['tr'], y)
    surface.quadratic_curve_to(x + width, y, x + width, y + radii['tr'])
    surface.line_to(x + width, y + height - radii['br'])
    surface.quadratic_curve_to(x + width, y + height, x + width - radii['br'], y + height)
    surface.line_to(x + radii['bl'], y + height)
    surface.quadratic_curve_to(x, y + height, x, y + height - radii['bl'])
    surface.line_to(x, y + radii['tl'])
    surface.quadratic_curve_to(x, y, x + radii['tl'], y)
    surface.close_path()

    if fill:
        surface.fill()
    if stroke:
        surface.stroke()

    return radii
