# /tests/test_gif_encoder.py
"""
Unit tests for the GIF encoder and its read stream
"""

import shutil
from io import BytesIO

import pytest
from PIL import Image

from src.components.gif_encoder import EncoderError, GifEncoder
from src.components.raster_surface import RasterSurface


@pytest.fixture
def surface():
    return RasterSurface(40, 30)


@pytest.fixture
def encoder():
    enc = GifEncoder(40, 30)
    enc.start()
    enc.set_repeat(0)
    enc.set_delay(1000)
    enc.set_quality(10)
    return enc


def _read_all(stream) -> bytes:
    buffer = BytesIO()
    shutil.copyfileobj(stream, buffer)
    return buffer.getvalue()


class TestGifEncoder:
    """Test cases for GifEncoder"""

    def test_encodes_looping_animation(self, encoder, surface):
        """Test that frames, delay and loop end up in the GIF"""
        stream = encoder.create_read_stream()
        for color in ('#FF0000', '#00FF00', '#0000FF'):
            surface.fill_style = color
            surface.fill_rect(0, 0, 40, 30)
            encoder.add_frame(surface)
        encoder.finish()

        data = _read_all(stream)
        assert data.startswith(b'GIF89a')
        assert encoder.frame_count == 3

        with Image.open(BytesIO(data)) as gif:
            assert gif.n_frames == 3
            assert gif.info['loop'] == 0
            assert gif.info['duration'] == 1000

    def test_frames_are_snapshots(self, encoder, surface):
        """Test that repainting the surface doesn't alter an added frame"""
        stream = encoder.create_read_stream()
        surface.fill_style = '#FFFFFF'
        surface.fill_rect(0, 0, 40, 30)
        encoder.add_frame(surface)
        surface.fill_style = '#000000'
        surface.fill_rect(0, 0, 40, 30)
        encoder.finish()

        with Image.open(BytesIO(_read_all(stream))) as gif:
            assert min(gif.convert('RGB').getpixel((5, 5))) > 240

    def test_finish_without_frames_fails_stream(self, encoder):
        """Test that an empty GIF raises and propagates to the reader"""
        stream = encoder.create_read_stream()
        with pytest.raises(EncoderError):
            encoder.finish()
        with pytest.raises(EncoderError):
            stream.read()

    def test_add_frame_before_start_raises(self, surface):
        enc = GifEncoder(40, 30)
        with pytest.raises(EncoderError):
            enc.add_frame(surface)

    def test_add_frame_size_mismatch_raises(self, encoder):
        with pytest.raises(EncoderError):
            encoder.add_frame(RasterSurface(10, 10))

    def test_quality_is_clamped(self):
        enc = GifEncoder(10, 10)
        enc.set_quality(0)
        assert enc.quality == 1
        enc.set_quality(99)
        assert enc.quality == 30

    def test_read_stream_is_shared(self, encoder):
        assert encoder.create_read_stream() is encoder.create_read_stream()
