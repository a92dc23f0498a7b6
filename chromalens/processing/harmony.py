from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .buffer import PixelBuffer
from .colorspace import rgb_to_hsl, round_half_up
from .palette import Color, palette_colors

logger = logging.getLogger(__name__)

STRONG = "strong"
MODERATE = "moderate"
WEAK = "weak"

EXPLANATIONS = {
    STRONG: "Strong color harmony with well-balanced relationships and consistent saturation.",
    MODERATE: "Moderate harmony. Some color relationships work well, but variance could be refined.",
    WEAK: (
        "Weak harmony. Colors may feel disjointed. Consider adjusting saturation "
        "consistency or hue relationships."
    ),
}


@dataclass(frozen=True)
class HarmonyResult:
    score: int
    complementary_balance: int
    warm_count: int
    cool_count: int
    saturation_variance: int
    palette: Tuple[Color, ...]

    @property
    def tier(self) -> str:
        return harmony_tier(self.score)

    @property
    def explanation(self) -> str:
        return EXPLANATIONS[self.tier]

    @property
    def warm_cool_ratio(self) -> str:
        return f"{self.warm_count}W : {self.cool_count}C"


def harmony_tier(score: int) -> str:
    if score >= 75:
        return STRONG
    if score >= 50:
        return MODERATE
    return WEAK


def hue_distance(h1: int, h2: int) -> int:
    diff = abs(h1 - h2)
    return min(diff, 360 - diff)


def complementary_balance(hues: Sequence[int]) -> int:
    points = 0
    for i in range(len(hues)):
        for j in range(i + 1, len(hues)):
            dist = hue_distance(hues[i], hues[j])
            if 150 < dist < 210:
                points += 20
            elif 60 < dist < 120:
                points += 10
    return max(0, min(100, points))


def is_warm(hue: int) -> bool:
    return 0 <= hue < 60 or hue >= 300


def saturation_spread(saturations: Sequence[int]) -> int:
    """Population standard deviation of the saturations, rounded."""
    if not saturations:
        return 0
    mean = sum(saturations) / len(saturations)
    variance = sum((s - mean) ** 2 for s in saturations) / len(saturations)
    return round_half_up(math.sqrt(variance))


def score_harmony(palette: Sequence[Color]) -> HarmonyResult:
    colors = tuple(Color(*color) for color in palette)
    if not colors:
        return HarmonyResult(0, 0, 0, 0, 0, ())

    hsl = [rgb_to_hsl(*color) for color in colors]
    hues = [entry.h for entry in hsl]

    balance = complementary_balance(hues)
    warm = sum(1 for hue in hues if is_warm(hue))
    sat_variance = saturation_spread([entry.s for entry in hsl])

    hue_spread = max(hues) - min(hues)
    spread_score = 40 if 30 < hue_spread < 300 else 20
    # A lone color has no saturation relationship to reward.
    if len(colors) < 2:
        sat_score = 0
    elif sat_variance < 25:
        sat_score = 30
    elif sat_variance < 50:
        sat_score = 20
    else:
        sat_score = 10
    score = min(100, spread_score + sat_score + round_half_up(balance * 0.3))

    logger.debug(
        "harmony spread=%s balance=%s sat_variance=%s score=%s",
        hue_spread,
        balance,
        sat_variance,
        score,
    )
    return HarmonyResult(
        score=score,
        complementary_balance=balance,
        warm_count=warm,
        cool_count=len(hues) - warm,
        saturation_variance=sat_variance,
        palette=colors,
    )


def analyze_harmony(buf: PixelBuffer, count: int = 6) -> HarmonyResult:
    return score_harmony(palette_colors(buf, count))
