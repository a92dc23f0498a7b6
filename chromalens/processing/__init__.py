"""Pixel-buffer analysis core: pure transforms and comparative metrics."""

from .buffer import PixelBuffer, coregister, resize
from .coherence import CoherenceResult, ScaleScore, coherence, coherence_display_maps
from .colorspace import HSL, hex_to_rgb, hsl_to_rgb, rgb_to_hex, rgb_to_hsl
from .composition import contour_overlay, grid_guides, sample_color, squint
from .difference import DifferenceMap, accuracy_heatmap, difference_map, render_heatmap
from .edges import edge_presence, sobel
from .entropy import EntropyGrid, entropy_grid, render_entropy_map
from .harmony import HarmonyResult, analyze_harmony, harmony_tier, score_harmony
from .palette import Color, DominantColor, dominant_colors
from .pipeline import AnalysisSession, GenerationCounter, PairReport, analyze_pair
from .values import grayscale, notan, threshold

__all__ = [
    "PixelBuffer",
    "coregister",
    "resize",
    "CoherenceResult",
    "ScaleScore",
    "coherence",
    "coherence_display_maps",
    "HSL",
    "hex_to_rgb",
    "hsl_to_rgb",
    "rgb_to_hex",
    "rgb_to_hsl",
    "contour_overlay",
    "grid_guides",
    "sample_color",
    "squint",
    "DifferenceMap",
    "accuracy_heatmap",
    "difference_map",
    "render_heatmap",
    "edge_presence",
    "sobel",
    "EntropyGrid",
    "entropy_grid",
    "render_entropy_map",
    "HarmonyResult",
    "analyze_harmony",
    "harmony_tier",
    "score_harmony",
    "Color",
    "DominantColor",
    "dominant_colors",
    "AnalysisSession",
    "GenerationCounter",
    "PairReport",
    "analyze_pair",
    "grayscale",
    "notan",
    "threshold",
]
