"""Animated GIF Encoder Component.

Collects rendered frames from a RasterSurface, palettizes them with Pillow and
writes the finished GIF to a readable byte stream, so the output can be piped
into a file (or any other sink) on another thread.

Usage mirrors the classic encoder handshake:

    encoder = GifEncoder(width, height)
    stream = encoder.create_read_stream()
    encoder.start()
    encoder.set_repeat(0)
    encoder.set_delay(1000)
    encoder.set_quality(10)
    encoder.add_frame(surface)
    encoder.finish()
"""

import io
import logging
import queue
from io import BytesIO

from PIL import Image

logger = logging.getLogger(__name__)

# Size of chunks pushed onto the read stream
CHUNK_SIZE = 64 * 1024

# Quality levels at or below this use the slower, better quantizer
HIGH_QUALITY_THRESHOLD = 5
MIN_QUALITY = 1
MAX_QUALITY = 30

_EOF = object()


class EncoderError(Exception):
    """Raised when the encoder is used out of order or fails to encode."""


class GifReadStream(io.RawIOBase):
    """Readable binary stream fed by the encoder.

    read() blocks until the encoder has produced data, reached the end of the
    GIF, or failed. A failure is re-raised on the reading side.
    """

    def __init__(self):
        super().__init__()
        self._chunks = queue.Queue()
        self._buffer = b''
        self._eof = False

    def readable(self):
        return True

    def push(self, data: bytes):
        if data:
            self._chunks.put(bytes(data))

    def end(self):
        self._chunks.put(_EOF)

    def abort(self, exc: BaseException):
        self._chunks.put(exc)

    def readinto(self, b):
        while not self._buffer and not self._eof:
            item = self._chunks.get()
            if item is _EOF:
                self._eof = True
            elif isinstance(item, BaseException):
                self._eof = True
                raise item
            else:
                self._buffer = item

        if not self._buffer:
            return 0

        n = min(len(b), len(self._buffer))
        b[:n] = self._buffer[:n]
        self._buffer = self._buffer[n:]
        return n


class GifEncoder:
    """Encode a sequence of equally sized frames into one looping GIF."""

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.repeat = 0
        self.delay = 0
        self.quality = 10
        self._frames = []
        self._started = False
        self._finished = False
        self._stream = None

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def create_read_stream(self) -> GifReadStream:
        if self._stream is None:
            self._stream = GifReadStream()
        return self._stream

    def start(self):
        self._frames = []
        self._started = True
        self._finished = False

    def set_repeat(self, count: int):
        """Loop count for the Netscape extension; 0 loops forever, -1 plays once."""
        self.repeat = int(count)

    def set_delay(self, ms: int):
        self.delay = max(0, int(ms))

    def set_quality(self, level: int):
        """Palette quality, 1 is best and slowest. Values are clamped to 1..30."""
        self.quality = max(MIN_QUALITY, min(int(level), MAX_QUALITY))

    def _quantize_method(self):
        if self.quality <= HIGH_QUALITY_THRESHOLD:
            return Image.Quantize.MEDIANCUT
        return Image.Quantize.FASTOCTREE

    def add_frame(self, surface):
        """Snapshot and palettize the surface's current pixels.

        Accepts a RasterSurface or a Pillow image. The surface can be repainted
        as soon as this returns.
        """
        if not self._started or self._finished:
            raise EncoderError("add_frame() called outside start()/finish()")

        image = getattr(surface, 'image', surface)
        if image.size != (self.width, self.height):
            raise EncoderError(f"Frame size {image.size} does not match encoder size {(self.width, self.height)}")

        frame = image.convert('RGB').quantize(
            colors=256,
            method=self._quantize_method(),
            dither=Image.Dither.NONE
        )
        self._frames.append(frame)
        logger.debug(f"Encoded frame {len(self._frames)} ({self.width}x{self.height})")

    def _save_kwargs(self) -> dict:
        kwargs = {
            'format': 'GIF',
            'save_all': True,
            'append_images': self._frames[1:],
            'duration': self.delay,
            'optimize': False,
        }
        # Pillow omits the loop extension entirely when 'loop' is absent, which plays once
        if self.repeat >= 0:
            kwargs['loop'] = self.repeat
        return kwargs

    def finish(self):
        """Write the GIF trailer and close the read stream.

        Raises:
            EncoderError: If no frames were added or the encoder was not started
        """
        stream = self.create_read_stream()
        try:
            if not self._started:
                raise EncoderError("finish() called before start()")
            if not self._frames:
                raise EncoderError("Cannot finish a GIF with no frames")

            buffer = BytesIO()
            self._frames[0].save(buffer, **self._save_kwargs())
        except BaseException as exc:
            stream.abort(exc)
            raise

        data = buffer.getvalue()
        for offset in range(0, len(data), CHUNK_SIZE):
            stream.push(data[offset:offset + CHUNK_SIZE])
        stream.end()

        self._finished = True
        logger.debug(f"GIF finished: {len(self._frames)} frames, {len(data)} bytes")
