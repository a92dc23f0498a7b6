from __future__ import annotations

import logging
import math

from .buffer import PixelBuffer
from .colorspace import clamp_channel

logger = logging.getLogger(__name__)

EDGE_CUTOFF = 30


def luma_plane(buf: PixelBuffer) -> bytes:
    """One byte of luma per pixel, row-major."""
    return buf.to_image().convert("L").tobytes()


def sobel(buf: PixelBuffer) -> PixelBuffer:
    """
    Gradient magnitude map from the 3x3 Sobel kernels.

    The outermost ring stays at magnitude 0 rather than being extrapolated.
    Every pixel, border included, gets alpha 255. Each output pixel reads only
    its own 3x3 neighbourhood, so rows can be processed in any order.
    """
    width, height = buf.size
    plane = luma_plane(buf)
    out = bytearray(width * height * 4)
    out[3::4] = b"\xff" * (width * height)

    for y in range(1, height - 1):
        above = (y - 1) * width
        row = y * width
        below = (y + 1) * width
        for x in range(1, width - 1):
            tl, tc, tr = plane[above + x - 1], plane[above + x], plane[above + x + 1]
            ml, mr = plane[row + x - 1], plane[row + x + 1]
            bl, bc, br = plane[below + x - 1], plane[below + x], plane[below + x + 1]

            gx = -tl + tr - 2 * ml + 2 * mr - bl + br
            gy = -tl - 2 * tc - tr + bl + 2 * bc + br

            magnitude = clamp_channel(min(255.0, math.sqrt(gx * gx + gy * gy)))
            offset = (row + x) * 4
            out[offset] = out[offset + 1] = out[offset + 2] = magnitude

    logger.debug("sobel %sx%s", width, height)
    return PixelBuffer(width, height, bytes(out))


def edge_presence(edge_map: PixelBuffer, cutoff: int = EDGE_CUTOFF) -> bytes:
    """Binarize an edge map to one 0/1 byte per pixel (``magnitude > cutoff``)."""
    return bytes(1 if value > cutoff else 0 for value in edge_map.pixels[0::4])
