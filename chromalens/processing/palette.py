from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Tuple

from .buffer import PixelBuffer
from .colorspace import HSL, rgb_to_hex, rgb_to_hsl, round_half_up

logger = logging.getLogger(__name__)

SAMPLE_TARGET = 2000
BUCKET_SIZE = 32


class Color(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return rgb_to_hex(self.r, self.g, self.b)

    @property
    def hsl(self) -> HSL:
        return rgb_to_hsl(self.r, self.g, self.b)


@dataclass(frozen=True)
class DominantColor:
    color: Color
    weight: int


class _Bucket:
    __slots__ = ("order", "r", "g", "b", "hits")

    def __init__(self, order: int) -> None:
        self.order = order
        self.r = 0
        self.g = 0
        self.b = 0
        self.hits = 0


def sample_stride(width: int, height: int) -> int:
    return max(1, (width * height) // SAMPLE_TARGET)


def bucket_key(r: int, g: int, b: int) -> Tuple[int, int, int]:
    return (
        round_half_up(r / BUCKET_SIZE) * BUCKET_SIZE,
        round_half_up(g / BUCKET_SIZE) * BUCKET_SIZE,
        round_half_up(b / BUCKET_SIZE) * BUCKET_SIZE,
    )


def dominant_colors(buf: PixelBuffer, count: int = 6) -> List[DominantColor]:
    """
    Approximate the dominant colors of ``buf`` with one pass of bucket quantization.

    Every ``step``-th pixel of the flattened buffer is sampled, snapped to a
    32-unit grid per channel, and averaged within its bucket. Buckets are
    ranked by hit count; equal counts keep the order in which the bucket was
    first seen.
    """
    if count <= 0:
        return []

    step = sample_stride(buf.width, buf.height)
    data = buf.pixels
    buckets: List[_Bucket] = []
    index: Dict[Tuple[int, int, int], _Bucket] = {}

    for offset in range(0, len(data), step * 4):
        r, g, b = data[offset], data[offset + 1], data[offset + 2]
        key = bucket_key(r, g, b)
        bucket = index.get(key)
        if bucket is None:
            bucket = _Bucket(len(buckets))
            buckets.append(bucket)
            index[key] = bucket
        bucket.r += r
        bucket.g += g
        bucket.b += b
        bucket.hits += 1

    ranked = sorted(buckets, key=lambda item: (-item.hits, item.order))[:count]
    logger.debug("dominant_colors step=%s buckets=%s kept=%s", step, len(buckets), len(ranked))
    return [
        DominantColor(
            Color(
                round_half_up(bucket.r / bucket.hits),
                round_half_up(bucket.g / bucket.hits),
                round_half_up(bucket.b / bucket.hits),
            ),
            bucket.hits,
        )
        for bucket in ranked
    ]


def palette_colors(buf: PixelBuffer, count: int = 7) -> List[Color]:
    return [entry.color for entry in dominant_colors(buf, count)]
