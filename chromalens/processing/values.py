from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from .buffer import PixelBuffer


@dataclass(frozen=True)
class ValueSummary:
    """Brightness statistics of a luma buffer."""

    mean: float
    low: int
    high: int


def grayscale(buf: PixelBuffer) -> PixelBuffer:
    """Write the luma of each pixel into r, g and b; alpha is kept."""
    img = buf.to_image()
    luma = img.convert("L")
    alpha = img.getchannel("A")
    out = Image.merge("RGBA", (luma, luma, luma, alpha))
    return PixelBuffer(buf.width, buf.height, out.tobytes())


def threshold(luma_buf: PixelBuffer, cutoff: int) -> PixelBuffer:
    """Binarize a luma buffer: 255 where ``luma >= cutoff``, otherwise 0."""
    lut = [255 if value >= cutoff else 0 for value in range(256)]
    red, _, _, alpha = luma_buf.to_image().split()
    mask = red.point(lut)
    out = Image.merge("RGBA", (mask, mask, mask, alpha))
    return PixelBuffer(luma_buf.width, luma_buf.height, out.tobytes())


def notan(buf: PixelBuffer, cutoff: int) -> PixelBuffer:
    return threshold(grayscale(buf), cutoff)


def _luma_histogram(luma_buf: PixelBuffer):
    return luma_buf.to_image().getchannel("R").histogram()


def value_summary(luma_buf: PixelBuffer) -> ValueSummary:
    histogram = _luma_histogram(luma_buf)
    total = luma_buf.width * luma_buf.height
    present = [value for value, hits in enumerate(histogram) if hits]
    mean = sum(value * hits for value, hits in enumerate(histogram)) / total
    return ValueSummary(mean, present[0], present[-1])


def white_ratio(binary_buf: PixelBuffer) -> float:
    """Share of pixels a notan buffer renders white."""
    histogram = _luma_histogram(binary_buf)
    return histogram[255] / (binary_buf.width * binary_buf.height)
