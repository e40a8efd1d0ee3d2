"""Countdown GIF Maker Component.

Renders an animated GIF that counts down to a deadline, one frame per second.
Each request gets its own surface, encoder and countdown, so concurrent
requests never share drawing state.

Layout coordinates are defined on a 900x300 design grid and scaled to the
requested canvas size.

Dependencies:
    - Pillow (PIL)
    - pytz
"""

import argparse
import logging
import os
import shutil
import tempfile
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Tuple

from PIL import ImageColor

from my_config import get_config
from src.components.countdown_duration import (
    CountdownDuration,
    CountdownFields,
    CountdownValue,
    compute_remaining,
)
from src.components.geometry import round_rect
from src.components.gif_encoder import GifEncoder
from src.components.raster_surface import RasterSurface, load_font

logger = logging.getLogger(__name__)

# Request bounds
MIN_WIDTH, MAX_WIDTH = 150, 900
MIN_HEIGHT, MAX_HEIGHT = 150, 500
MIN_FRAMES, MAX_FRAMES = 1, 90

# Encoder settings
REPEAT_FOREVER = 0
FRAME_DELAY_MS = 1000
ENCODER_QUALITY = 10

# Design grid all positions are expressed in
DESIGN_WIDTH = 900
DESIGN_HEIGHT = 300

# Font sizes on the design grid (scaled with canvas width)
NUMBER_FONT_SIZE = 60
UNIT_FONT_SIZE = 40
TITLE_FONT_SIZE = 36
BUTTON_FONT_SIZE = 40
EXPIRED_FONT_SIZE = 52

# Element anchors on the design grid
NUMBER_ANCHORS = ((176, 130), (328, 130), (518, 130), (671, 130))
UNIT_ANCHORS = ((230, 135), (397, 135), (578, 135), (731, 135))
TITLE_ANCHOR = (450, 60)
BUTTON_BOX = (270, 180, 360, 80)
BUTTON_RADIUS = 10
BUTTON_LABEL_ANCHOR = (450, 220)
EXPIRED_ANCHOR = (450, 150)
LEFT_TRIANGLE = ((0, 0), (0, 300), (33, 300), (98, 0))
RIGHT_TRIANGLE = ((900, 0), (900, 300), (802, 300), (867, 0))

ACCENT_COLOR = '#FF007B'

_writer_pool = ThreadPoolExecutor(max_workers=4, thread_name_prefix='countdown-gif-writer')


def clamp(number, minimum, maximum):
    return max(minimum, min(int(number), maximum))


def normalize_color(value: str) -> str:
    """Return a '#'-prefixed hex color, raising ValueError if Pillow can't parse it."""
    color = '#' + str(value).strip().lstrip('#')
    ImageColor.getrgb(color)
    return color


@dataclass(frozen=True)
class CountdownText:
    """Copy painted on the countdown frames."""
    title: str = 'Promotion ends in'
    units: Tuple[str, str, str, str] = ('d', 'h', 'm', 's')
    button: str = 'Shop now'
    expired: str = 'This promotion has ended.'


@dataclass
class GenerationRequest:
    """Parameters for one countdown GIF. Sizes and frame count are clamped."""
    target: str
    width: int = 900
    height: int = 300
    color: str = 'ffffff'
    background: str = '000000'
    name: str = 'default'
    frames: int = 30
    text: CountdownText = field(default_factory=CountdownText)

    def __post_init__(self):
        self.width = clamp(self.width, MIN_WIDTH, MAX_WIDTH)
        self.height = clamp(self.height, MIN_HEIGHT, MAX_HEIGHT)
        self.frames = clamp(self.frames, MIN_FRAMES, MAX_FRAMES)
        self.color = normalize_color(self.color)
        self.background = normalize_color(self.background)


@dataclass(frozen=True)
class Layout:
    """Maps design-grid coordinates onto the actual canvas."""
    scale_x: float
    scale_y: float

    @classmethod
    def for_canvas(cls, width: int, height: int) -> 'Layout':
        return cls(width / DESIGN_WIDTH, height / DESIGN_HEIGHT)

    def point(self, x: float, y: float) -> Tuple[float, float]:
        return x * self.scale_x, y * self.scale_y

    def font_size(self, design_size: int) -> int:
        return max(1, round(design_size * self.scale_x))


@dataclass
class RenderContext:
    """Everything one render owns: request, layout, surface and encoder."""
    request: GenerationRequest
    layout: Layout
    surface: RasterSurface
    encoder: GifEncoder

    @classmethod
    def for_request(cls, request: GenerationRequest) -> 'RenderContext':
        surface = RasterSurface(request.width, request.height)
        # Every text element is centered on its anchor
        surface.text_align = 'center'
        surface.text_baseline = 'middle'
        return cls(
            request=request,
            layout=Layout.for_canvas(request.width, request.height),
            surface=surface,
            encoder=GifEncoder(request.width, request.height),
        )


def _draw_text(ctx: RenderContext, text: str, anchor: Tuple[float, float], design_font_size: int):
    surface = ctx.surface
    surface.font = load_font(ctx.layout.font_size(design_font_size))
    surface.fill_style = ctx.request.color
    surface.fill_text(text, *ctx.layout.point(*anchor))


def _draw_polygon(ctx: RenderContext, points, color: str):
    surface = ctx.surface
    surface.fill_style = color
    surface.begin_path()
    surface.move_to(*ctx.layout.point(*points[0]))
    for point in points[1:]:
        surface.line_to(*ctx.layout.point(*point))
    surface.fill()


def _paint_background(ctx: RenderContext):
    ctx.surface.fill_style = ctx.request.background
    ctx.surface.fill_rect(0, 0, ctx.request.width, ctx.request.height)


def _paint_side_triangles(ctx: RenderContext):
    _draw_polygon(ctx, LEFT_TRIANGLE, ACCENT_COLOR)
    _draw_polygon(ctx, RIGHT_TRIANGLE, ACCENT_COLOR)


def paint_countdown_frame(ctx: RenderContext, fields: CountdownFields):
    """Paint one full countdown scene for the given field values."""
    text = ctx.request.text
    _paint_background(ctx)

    values = (fields.days, fields.hours, fields.minutes, fields.seconds)
    for value, anchor in zip(values, NUMBER_ANCHORS):
        _draw_text(ctx, value, anchor, NUMBER_FONT_SIZE)
    for unit, anchor in zip(text.units, UNIT_ANCHORS):
        _draw_text(ctx, unit, anchor, UNIT_FONT_SIZE)

    _draw_text(ctx, text.title, TITLE_ANCHOR, TITLE_FONT_SIZE)

    # Call-to-action button: accent fill, default black outline
    x, y, width, height = BUTTON_BOX
    left, top = ctx.layout.point(x, y)
    right, bottom = ctx.layout.point(x + width, y + height)
    ctx.surface.fill_style = ACCENT_COLOR
    round_rect(ctx.surface, left, top, right - left, bottom - top,
               BUTTON_RADIUS * min(ctx.layout.scale_x, ctx.layout.scale_y), fill=True)
    _draw_text(ctx, text.button, BUTTON_LABEL_ANCHOR, BUTTON_FONT_SIZE)

    _paint_side_triangles(ctx)


def paint_expired_frame(ctx: RenderContext):
    """Paint the single frame shown once the deadline has passed."""
    _paint_background(ctx)
    _draw_text(ctx, ctx.request.text.expired, EXPIRED_ANCHOR, EXPIRED_FONT_SIZE)
    _paint_side_triangles(ctx)


def _pipe_to_file(stream, file_handle, file_path: str) -> str:
    """Copy the encoder's output into the open temp file, then move it onto file_path."""
    tmp_path = file_handle.name
    try:
        with file_handle:
            shutil.copyfileobj(stream, file_handle)
        os.replace(tmp_path, file_path)
    except BaseException:
        # Only this request's temp file is discarded, an existing GIF stays
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    return file_path


def _notify_on_success(on_complete: Callable[[str], None]):
    def callback(future: Future):
        if future.cancelled() or future.exception() is not None:
            return
        on_complete(future.result())
    return callback


def render(request: GenerationRequest, countdown: CountdownValue,
           on_complete: Optional[Callable[[str], None]] = None,
           output_dir: Optional[str] = None) -> Future:
    """Render the countdown GIF for a request and stream it to disk.

    Frames are painted and encoded synchronously. A writer thread streams the
    encoded bytes into a temp file in output_dir, which replaces
    <output_dir>/<name>.gif once it is complete.

    Args:
        request: Size, colors, output name and frame count
        countdown: CountdownDuration to count down from, or EXPIRED
        on_complete: Called once with the file path after the file is fully written
        output_dir: Directory for the GIF (defaults to COUNTDOWN_OUTPUT_DIR)

    Returns:
        Future resolving to the output file path

    Raises:
        OSError: If the output directory or file can't be created
    """
    output_dir = output_dir or get_config().countdown_output_dir
    os.makedirs(output_dir, exist_ok=True)
    file_path = os.path.join(output_dir, f"{request.name}.gif")

    ctx = RenderContext.for_request(request)
    encoder = ctx.encoder
    stream = encoder.create_read_stream()

    file_handle = tempfile.NamedTemporaryFile(
        dir=output_dir, prefix=f"{request.name}.", suffix='.gif.tmp', delete=False
    )
    future = _writer_pool.submit(_pipe_to_file, stream, file_handle, file_path)
    if on_complete is not None:
        future.add_done_callback(_notify_on_success(on_complete))

    try:
        encoder.start()
        encoder.set_repeat(REPEAT_FOREVER)
        encoder.set_delay(FRAME_DELAY_MS)
        encoder.set_quality(ENCODER_QUALITY)

        if isinstance(countdown, CountdownDuration):
            logger.debug(f"Rendering up to {request.frames} countdown frames for '{request.name}'")
            for _ in range(request.frames):
                paint_countdown_frame(ctx, countdown.breakdown())
                encoder.add_frame(ctx.surface)
                countdown.subtract_second()
                if countdown.is_exhausted():
                    break
        else:
            logger.info(f"Countdown '{request.name}' has expired - rendering static frame")
            paint_expired_frame(ctx)
            encoder.add_frame(ctx.surface)

        encoder.finish()
    except BaseException as exc:
        # The writer thread blocks on the stream until it ends or is aborted
        stream.abort(exc)
        raise

    logger.info(f"Generated countdown GIF '{request.name}': {encoder.frame_count} frames -> {file_path}")

    return future


def generate_countdown_gif(request: GenerationRequest, now: Optional[datetime] = None,
                           output_dir: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Compute the remaining time, render the GIF and wait until it's on disk.

    Returns:
        Path of the written GIF

    Raises:
        ValueError: If the request's target timestamp can't be parsed
    """
    logger.debug(f"Generating countdown GIF for deadline: {request.target}")
    countdown = compute_remaining(request.target, now=now)
    return render(request, countdown, output_dir=output_dir).result(timeout=timeout)


def main():
    """Generate a countdown GIF from the command line."""
    from src.utils.logging_utils import setup_logging

    parser = argparse.ArgumentParser(description="Render a countdown GIF to a deadline.")
    parser.add_argument('target', help="Deadline, e.g. 2025-11-11T15:00:00-05:00")
    parser.add_argument('--width', type=int, default=900)
    parser.add_argument('--height', type=int, default=300)
    parser.add_argument('--color', default='ffffff')
    parser.add_argument('--bg', default='000000')
    parser.add_argument('--name', default='default')
    parser.add_argument('--frames', type=int, default=30)
    parser.add_argument('--output-dir', default=None)
    parser.add_argument('--log-dir', default=None, help="Defaults to LOG_DIR")
    args = parser.parse_args()

    setup_logging(app_name='countdown_gif_maker', log_dir=args.log_dir)

    request = GenerationRequest(
        target=args.target,
        width=args.width,
        height=args.height,
        color=args.color,
        background=args.bg,
        name=args.name,
        frames=args.frames,
    )
    print(generate_countdown_gif(request, output_dir=args.output_dir))


if __name__ == "__main__":
    main()
