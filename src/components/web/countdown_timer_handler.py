"""Countdown Timer Handler for the web server."""

import logging
import shutil
from io import BytesIO
from typing import Any, Mapping

from werkzeug.utils import secure_filename

from src.components import countdown_gif_maker
from src.components.countdown_gif_maker import GenerationRequest
from src.components.gif_encoder import GifEncoder
from src.components.raster_surface import RasterSurface, load_font

logger = logging.getLogger(__name__)

ERROR_WIDTH = 450
ERROR_HEIGHT = 150
ERROR_BACKGROUND = '#DC3545'


def build_request(deadline_str: str, params: Mapping[str, Any]) -> GenerationRequest:
    """Build a GenerationRequest from query parameters.

    Args:
        deadline_str: ISO 8601 timestamp (e.g., 2025-11-11T15:00:00-05:00)
        params: Optional width, height, color, bg, name and frames values

    Raises:
        ValueError: If a numeric parameter or color is invalid
    """
    name = secure_filename(str(params.get('name') or 'default')) or 'default'
    return GenerationRequest(
        target=deadline_str,
        width=params.get('width') or 900,
        height=params.get('height') or 300,
        color=params.get('color') or 'ffffff',
        background=params.get('bg') or '000000',
        name=name,
        frames=params.get('frames') or 30,
    )


def generate_countdown_timer(deadline_str: str, params: Mapping[str, Any] = None) -> str:
    """Generate an animated countdown timer GIF and return its path.

    A fresh GIF is generated from the current time on every request.

    Raises:
        ValueError: If the deadline or any parameter is invalid
    """
    logger.info(f"Generating countdown timer for deadline: {deadline_str}")

    try:
        request = build_request(deadline_str, params or {})
        return countdown_gif_maker.generate_countdown_gif(request)
    except ValueError as val_err:
        logger.error(f"Invalid countdown request: {val_err}", exc_info=True)
        raise


def generate_error_timer(error_message: str = "Error generating timer") -> BytesIO:
    """Generate a single-frame error GIF.

    Returns:
        BytesIO buffer with the GIF image
    """
    logger.warning(f"Generating error timer with message: {error_message}")
    surface = RasterSurface(ERROR_WIDTH, ERROR_HEIGHT)
    surface.fill_style = ERROR_BACKGROUND
    surface.fill_rect(0, 0, ERROR_WIDTH, ERROR_HEIGHT)
    surface.font = load_font(18)
    surface.fill_style = '#FFFFFF'
    surface.text_align = 'center'
    surface.text_baseline = 'middle'
    surface.fill_text(error_message, ERROR_WIDTH / 2, ERROR_HEIGHT / 2)

    encoder = GifEncoder(ERROR_WIDTH, ERROR_HEIGHT)
    stream = encoder.create_read_stream()
    encoder.start()
    encoder.add_frame(surface)
    encoder.finish()

    img_buffer = BytesIO()
    shutil.copyfileobj(stream, img_buffer)
    img_buffer.seek(0)
    return img_buffer
