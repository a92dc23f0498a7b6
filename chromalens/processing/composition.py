from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple

from PIL import ImageFilter

from ..config import PARAM_RANGES, SINGLE_BOUNDS
from .buffer import PixelBuffer, resize
from .colorspace import HSL, brightness, rgb_to_hex, rgb_to_hsl
from .edges import sobel

GOLDEN_RATIO = 1.618
GRID_KINDS = ("thirds", "4x4", "6x6", "golden", "diagonal", "custom")
_FIXED_GRIDS = {"thirds": 3, "4x4": 4, "6x6": 6}


class GuideLine(NamedTuple):
    """A guide in normalized 0-100 coordinates over the image."""

    x1: float
    y1: float
    x2: float
    y2: float
    weight: float = 0.5


@dataclass(frozen=True)
class SampledColor:
    r: int
    g: int
    b: int
    hex: str
    hsl: HSL
    brightness: int


def _clamp_grid(value: int) -> int:
    low, high = PARAM_RANGES["grid"]
    return max(low, min(high, int(value)))


def grid_guides(kind: str, rows: int = 3, cols: int = 3) -> List[GuideLine]:
    if kind not in GRID_KINDS:
        raise ValueError(f"Unknown grid kind: {kind!r}")

    if kind == "diagonal":
        return [GuideLine(0, 0, 100, 100), GuideLine(100, 0, 0, 100)]

    if kind == "golden":
        major = 100 / GOLDEN_RATIO
        minor = 100 - major
        return [
            GuideLine(major, 0, major, 100),
            GuideLine(minor, 0, minor, 100),
            GuideLine(0, major, 100, major),
            GuideLine(0, minor, 100, minor),
        ]

    if kind == "custom":
        rows, cols = _clamp_grid(rows), _clamp_grid(cols)
    else:
        rows = cols = _FIXED_GRIDS[kind]

    lines = [GuideLine(i / cols * 100, 0, i / cols * 100, 100) for i in range(1, cols)]
    lines += [GuideLine(0, i / rows * 100, 100, i / rows * 100) for i in range(1, rows)]
    return lines


def squint(buf: PixelBuffer, radius: int = 5) -> PixelBuffer:
    """Blur away detail so only the broad value and color masses remain."""
    radius = max(1, min(20, int(radius)))
    blurred = buf.to_image().filter(ImageFilter.GaussianBlur(radius))
    return PixelBuffer.from_image(blurred)


def sample_color(buf: PixelBuffer, x: int, y: int) -> SampledColor:
    r, g, b, _ = buf.pixel(x, y)
    return SampledColor(r, g, b, rgb_to_hex(r, g, b), rgb_to_hsl(r, g, b), brightness(r, g, b))


def contour_overlay(buf: PixelBuffer) -> PixelBuffer:
    return sobel(resize(buf, *SINGLE_BOUNDS))
