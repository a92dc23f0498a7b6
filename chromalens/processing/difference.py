from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Tuple

from ..config import PAIR_BOUNDS
from .buffer import PixelBuffer, coregister, require_same_size
from .colorspace import clamp_channel
from .values import grayscale

logger = logging.getLogger(__name__)

MATCH_RGBA = (0, 180, 0, 60)
MISMATCH_ALPHA = 180


@dataclass(frozen=True)
class DifferenceMap:
    """Per-pixel match/mismatch classification with a visual weight.

    ``intensity`` holds one byte per pixel, non-zero only for mismatches.
    """

    width: int
    height: int
    sensitivity: int
    mismatch: Tuple[bool, ...]
    intensity: bytes

    @property
    def mismatch_count(self) -> int:
        return sum(self.mismatch)

    @property
    def match_ratio(self) -> float:
        total = self.width * self.height
        return (total - self.mismatch_count) / total

    def is_mismatch(self, x: int, y: int) -> bool:
        return self.mismatch[y * self.width + x]


def difference_map(reference: PixelBuffer, artwork: PixelBuffer, sensitivity: int) -> DifferenceMap:
    """Compare two co-registered grayscale buffers pixel by pixel.

    A pixel is a mismatch when ``|luma_ref - luma_art| > sensitivity``; its
    intensity is ``min(255, diff / 255 * 512)``.
    """
    require_same_size(reference, artwork)
    if sensitivity < 0:
        raise ValueError(f"sensitivity must be non-negative, got {sensitivity}")

    ref = reference.pixels[0::4]
    art = artwork.pixels[0::4]
    flags = []
    intensity = bytearray(len(ref))
    for i, (a, b) in enumerate(zip(ref, art)):
        diff = abs(a - b)
        if diff > sensitivity:
            flags.append(True)
            intensity[i] = clamp_channel(min(255.0, diff / 255 * 512))
        else:
            flags.append(False)

    result = DifferenceMap(
        reference.width, reference.height, sensitivity, tuple(flags), bytes(intensity)
    )
    logger.debug(
        "difference_map %sx%s sensitivity=%s mismatches=%s",
        result.width,
        result.height,
        sensitivity,
        result.mismatch_count,
    )
    return result


def render_heatmap(diff: DifferenceMap) -> PixelBuffer:
    """Red for mismatches weighted by intensity, translucent green for matches."""
    out = bytearray()
    match = bytes(MATCH_RGBA)
    for flagged, value in zip(diff.mismatch, diff.intensity):
        out += bytes((value, 0, 0, MISMATCH_ALPHA)) if flagged else match
    return PixelBuffer(diff.width, diff.height, bytes(out))


def accuracy_heatmap(reference: PixelBuffer, artwork: PixelBuffer, sensitivity: int) -> DifferenceMap:
    ref, art = coregister(reference, artwork, *PAIR_BOUNDS)
    return difference_map(grayscale(ref), grayscale(art), sensitivity)
