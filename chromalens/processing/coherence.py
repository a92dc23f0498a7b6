from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..config import COHERENCE_DISPLAY_BOUNDS, COHERENCE_NATIVE_BOUNDS, COHERENCE_SCALES
from .buffer import PixelBuffer, fit_scale, resample
from .colorspace import round_half_up
from .edges import EDGE_CUTOFF, edge_presence, sobel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaleScore:
    scale_factor: float
    score: int
    label: str = ""


@dataclass(frozen=True)
class CoherenceResult:
    per_scale: Tuple[ScaleScore, ...]
    average: int


@dataclass(frozen=True)
class EdgeBits:
    """Binarized edge presence, one 0/1 byte per pixel."""

    width: int
    height: int
    bits: bytes

    def crop(self, width: int, height: int) -> bytes:
        if (width, height) == (self.width, self.height):
            return self.bits
        return b"".join(
            self.bits[y * self.width:y * self.width + width] for y in range(height)
        )


def edge_bits_at_scale(buf: PixelBuffer, scale: float, cutoff: int = EDGE_CUTOFF) -> Optional[EdgeBits]:
    width = math.floor(buf.width * scale)
    height = math.floor(buf.height * scale)
    if width <= 0 or height <= 0:
        return None
    edges = sobel(resample(buf, width, height))
    return EdgeBits(width, height, edge_presence(edges, cutoff))


def agreement_score(reference: Optional[EdgeBits], artwork: Optional[EdgeBits]) -> int:
    """Percentage of edge-present pixels where both maps carry an edge.

    Only pixels with an edge in at least one map are counted. With no such
    pixels the maps agree trivially and the score is 100.
    """
    if reference is None or artwork is None:
        return 100
    width = min(reference.width, artwork.width)
    height = min(reference.height, artwork.height)
    ref_bits = reference.crop(width, height)
    art_bits = artwork.crop(width, height)

    total = 0
    matches = 0
    for a, b in zip(ref_bits, art_bits):
        if a or b:
            total += 1
            if a == b:
                matches += 1
    if total == 0:
        return 100
    return round_half_up(100 * matches / total)


def cap_pair(
    a: PixelBuffer, b: PixelBuffer, max_width: int, max_height: int
) -> Tuple[PixelBuffer, PixelBuffer]:
    scale = fit_scale(
        max(a.width, b.width), max(a.height, b.height), max_width, max_height
    )
    if scale >= 1.0:
        return a, b
    capped = []
    for buf in (a, b):
        width = max(1, math.floor(buf.width * scale))
        height = max(1, math.floor(buf.height * scale))
        capped.append(resample(buf, width, height))
    logger.debug("coherence working scale=%.4f", scale)
    return capped[0], capped[1]


def coherence(
    reference: PixelBuffer,
    artwork: PixelBuffer,
    scales: Sequence[Tuple[str, float]] = COHERENCE_SCALES,
    cutoff: int = EDGE_CUTOFF,
) -> CoherenceResult:
    """Multi-scale edge agreement between two native-resolution images.

    Pairs larger than the native bounds are first shrunk by one shared factor,
    so both images keep their relative size before the per-scale pass.
    """
    reference, artwork = cap_pair(reference, artwork, *COHERENCE_NATIVE_BOUNDS)
    per_scale = []
    for label, factor in scales:
        score = agreement_score(
            edge_bits_at_scale(reference, factor, cutoff),
            edge_bits_at_scale(artwork, factor, cutoff),
        )
        logger.debug("coherence scale=%s score=%s", factor, score)
        per_scale.append(ScaleScore(factor, score, label))

    average = round_half_up(sum(entry.score for entry in per_scale) / len(per_scale)) if per_scale else 100
    return CoherenceResult(tuple(per_scale), average)


def coherence_display_maps(reference: PixelBuffer, artwork: PixelBuffer) -> Tuple[PixelBuffer, PixelBuffer]:
    """Edge maps of both images at a display scale fitted to the reference."""
    scale = fit_scale(reference.width, reference.height, *COHERENCE_DISPLAY_BOUNDS)
    maps = []
    for buf in (reference, artwork):
        width = max(1, math.floor(buf.width * scale))
        height = max(1, math.floor(buf.height * scale))
        maps.append(sobel(resample(buf, width, height)))
    return maps[0], maps[1]
