"""Local value-distribution complexity.

This is a variance proxy, not Shannon entropy: each grid cell is scored by the
standard deviation of its luma values normalized against 128 and capped at 1.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Tuple

from ..config import PARAM_RANGES
from .buffer import PixelBuffer
from .colorspace import clamp_channel, round_half_up
from .values import grayscale

logger = logging.getLogger(__name__)

ENTROPY_ALPHA = 178


@dataclass(frozen=True)
class EntropyGrid:
    rows: int
    cols: int
    cells: Tuple[Tuple[float, ...], ...]
    average: float

    @property
    def percent(self) -> int:
        return round_half_up(self.average * 100)


def _cell_score(values) -> float:
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return min(1.0, math.sqrt(variance) / 128)


def entropy_grid(buf: PixelBuffer, grid: int = 8) -> EntropyGrid:
    low, high = PARAM_RANGES["grid"]
    if not low <= grid <= high:
        raise ValueError(f"grid must be between {low} and {high}, got {grid}")

    width, height = buf.size
    plane = grayscale(buf).pixels[0::4]
    cell_w = width // grid
    cell_h = height // grid

    rows = []
    for gy in range(grid):
        y0 = gy * cell_h
        row = []
        for gx in range(grid):
            x0 = gx * cell_w
            values = []
            for y in range(y0, y0 + cell_h):
                start = y * width + x0
                values.extend(plane[start:start + cell_w])
            row.append(_cell_score(values))
        rows.append(tuple(row))

    average = sum(sum(row) for row in rows) / (grid * grid)
    logger.debug("entropy_grid %sx%s cell=%sx%s average=%.4f", width, height, cell_w, cell_h, average)
    return EntropyGrid(grid, grid, tuple(rows), average)


def render_entropy_map(result: EntropyGrid, width: int, height: int) -> PixelBuffer:
    """Heat map: blue for uniform cells, yellow/red for complex ones."""
    out = bytearray(width * height * 4)
    for y in range(height):
        gy = min(result.rows - 1, y * result.rows // height)
        for x in range(width):
            gx = min(result.cols - 1, x * result.cols // width)
            v = result.cells[gy][gx]
            offset = (y * width + x) * 4
            out[offset] = clamp_channel(v * 255)
            out[offset + 1] = clamp_channel(v * 200)
            out[offset + 2] = clamp_channel((1 - v) * 255)
            out[offset + 3] = ENTROPY_ALPHA
    return PixelBuffer(width, height, bytes(out))
