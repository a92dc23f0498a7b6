from __future__ import annotations

import math
import re
from typing import NamedTuple, Tuple

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


class HSL(NamedTuple):
    h: int
    s: int
    l: int


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_channel(value: float) -> int:
    """Store a float as an 8-bit channel the way a clamped byte array does."""
    return max(0, min(255, round(value)))


def luma(r: int, g: int, b: int) -> float:
    return 0.299 * r + 0.587 * g + 0.114 * b


def brightness(r: int, g: int, b: int) -> int:
    return round_half_up(luma(r, g, b))


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    rf, gf, bf = r / 255, g / 255, b / 255
    high = max(rf, gf, bf)
    low = min(rf, gf, bf)
    lightness = (high + low) / 2
    hue = 0.0
    saturation = 0.0

    if high != low:
        delta = high - low
        if lightness > 0.5:
            saturation = delta / (2 - high - low)
        else:
            saturation = delta / (high + low)
        if high == rf:
            hue = ((gf - bf) / delta + (6 if gf < bf else 0)) / 6
        elif high == gf:
            hue = ((bf - rf) / delta + 2) / 6
        else:
            hue = ((rf - gf) / delta + 4) / 6

    return HSL(
        round_half_up(hue * 360) % 360,
        round_half_up(saturation * 100),
        round_half_up(lightness * 100),
    )


def _hue_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Inverse of :func:`rgb_to_hsl` for degrees and percentages."""
    hf = (h % 360) / 360
    sf = s / 100
    lf = l / 100
    if sf == 0:
        value = round_half_up(lf * 255)
        return value, value, value
    q = lf * (1 + sf) if lf < 0.5 else lf + sf - lf * sf
    p = 2 * lf - q
    return (
        round_half_up(_hue_channel(p, q, hf + 1 / 3) * 255),
        round_half_up(_hue_channel(p, q, hf) * 255),
        round_half_up(_hue_channel(p, q, hf - 1 / 3) * 255),
    )


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return "#" + "".join(f"{value:02x}" for value in (r, g, b))


def hex_to_rgb(value: str) -> RGB:
    match = _HEX_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid hex color: {value!r}")
    digits = match.group(1)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
