from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from ..errors import InvalidImageError

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


@dataclass(frozen=True)
class PixelBuffer:
    """Immutable RGBA pixel grid, row-major with a top-left origin.

    Every analysis step takes a ``PixelBuffer`` and returns a new one; the
    ``pixels`` payload is always ``bytes`` so a buffer can be shared between
    threads or pickled across processes without copying concerns.
    """

    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidImageError(
                f"Buffer must have a non-zero area, got {self.width}x{self.height}"
            )
        if not isinstance(self.pixels, bytes):
            object.__setattr__(self, "pixels", bytes(self.pixels))
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise InvalidImageError(
                f"Expected {expected} bytes for {self.width}x{self.height} RGBA, "
                f"got {len(self.pixels)}"
            )

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        width, height = img.size
        if width == 0 or height == 0:
            raise InvalidImageError(f"Image has zero area: {width}x{height}")
        rgba = img if img.mode == "RGBA" else img.convert("RGBA")
        return cls(width, height, rgba.tobytes())

    @classmethod
    def solid(cls, width: int, height: int, rgba: RGBA = (0, 0, 0, 255)) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise InvalidImageError(f"Buffer must have a non-zero area, got {width}x{height}")
        return cls(width, height, bytes(rgba) * (width * height))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), self.pixels)

    def pixel(self, x: int, y: int) -> RGBA:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise InvalidImageError(f"({x}, {y}) is outside {self.width}x{self.height}")
        offset = (y * self.width + x) * 4
        r, g, b, a = self.pixels[offset:offset + 4]
        return r, g, b, a

    def crop(self, width: int, height: int) -> "PixelBuffer":
        """Return the top-left ``width`` x ``height`` region."""
        if width > self.width or height > self.height:
            raise InvalidImageError(
                f"Cannot crop {self.width}x{self.height} to {width}x{height}"
            )
        if (width, height) == self.size:
            return self
        row_bytes = width * 4
        stride = self.width * 4
        rows = [self.pixels[y * stride:y * stride + row_bytes] for y in range(height)]
        return PixelBuffer(width, height, b"".join(rows))


def resample(source: PixelBuffer, width: int, height: int) -> PixelBuffer:
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Cannot resample to {width}x{height}")
    if (width, height) == source.size:
        return source
    img = source.to_image().resize((width, height), Image.BILINEAR)
    return PixelBuffer(width, height, img.tobytes())


def fit_scale(width: int, height: int, max_width: int, max_height: int) -> float:
    if width <= 0 or height <= 0:
        raise InvalidImageError(f"Image has zero area: {width}x{height}")
    return min(max_width / width, max_height / height, 1.0)


def resize(source: PixelBuffer, max_width: int, max_height: int) -> PixelBuffer:
    """Shrink ``source`` to fit within the bounds, never upscaling."""
    scale = fit_scale(source.width, source.height, max_width, max_height)
    width = max(1, math.floor(source.width * scale))
    height = max(1, math.floor(source.height * scale))
    logger.debug("resize %sx%s -> %sx%s", source.width, source.height, width, height)
    return resample(source, width, height)


def coregister(
    a: PixelBuffer, b: PixelBuffer, max_width: int, max_height: int
) -> Tuple[PixelBuffer, PixelBuffer]:
    """Resize a pair with one shared scale and crop both to the common area."""
    scale = fit_scale(
        max(a.width, b.width), max(a.height, b.height), max_width, max_height
    )
    resized = []
    for buf in (a, b):
        width = max(1, math.floor(buf.width * scale))
        height = max(1, math.floor(buf.height * scale))
        resized.append(resample(buf, width, height))
    common_w = min(resized[0].width, resized[1].width)
    common_h = min(resized[0].height, resized[1].height)
    logger.debug("coregister scale=%.4f common=%sx%s", scale, common_w, common_h)
    return resized[0].crop(common_w, common_h), resized[1].crop(common_w, common_h)


def require_same_size(a: PixelBuffer, b: PixelBuffer) -> None:
    if a.size != b.size:
        raise InvalidImageError(
            f"Buffers are not co-registered: {a.width}x{a.height} vs {b.width}x{b.height}"
        )
