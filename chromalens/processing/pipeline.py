from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import SETTINGS, SINGLE_BOUNDS, AnalysisSettings, clamp_param
from .buffer import PixelBuffer, resize
from .coherence import CoherenceResult, coherence
from .difference import DifferenceMap, accuracy_heatmap
from .edges import sobel
from .entropy import EntropyGrid, entropy_grid
from .harmony import HarmonyResult, score_harmony
from .palette import DominantColor, dominant_colors
from .values import ValueSummary, grayscale, notan, value_summary, white_ratio

logger = logging.getLogger(__name__)


class GenerationCounter:
    """Hands out increasing tokens; only the newest token may commit."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def is_current(self, token: int) -> bool:
        return token == self._current


@dataclass(frozen=True)
class PreparedPair:
    """Native inputs plus their bounded single-image working copies."""

    reference_native: PixelBuffer
    artwork_native: PixelBuffer
    reference: PixelBuffer
    artwork: PixelBuffer


@dataclass(frozen=True)
class ImageReport:
    width: int
    height: int
    palette: Tuple[DominantColor, ...]
    harmony: HarmonyResult
    entropy: EntropyGrid
    values: ValueSummary
    notan_threshold: int
    notan_white_ratio: float


@dataclass(frozen=True)
class PairReport:
    reference: ImageReport
    artwork: ImageReport
    accuracy: DifferenceMap
    coherence: CoherenceResult


def prepare_pair(reference: PixelBuffer, artwork: PixelBuffer) -> PreparedPair:
    # The two resizes are independent; neither result depends on which finishes first.
    with ThreadPoolExecutor(max_workers=2) as pool:
        ref_future = pool.submit(resize, reference, *SINGLE_BOUNDS)
        art_future = pool.submit(resize, artwork, *SINGLE_BOUNDS)
        return PreparedPair(reference, artwork, ref_future.result(), art_future.result())


def analyze_image(
    buf: PixelBuffer,
    settings: AnalysisSettings = SETTINGS,
    grid: Optional[int] = None,
    threshold: Optional[int] = None,
) -> ImageReport:
    cutoff = settings.threshold if threshold is None else threshold
    palette = tuple(dominant_colors(buf, settings.palette_count))
    harmony_palette = [entry.color for entry in dominant_colors(buf, settings.harmony_count)]
    return ImageReport(
        width=buf.width,
        height=buf.height,
        palette=palette,
        harmony=score_harmony(harmony_palette),
        entropy=entropy_grid(buf, grid if grid is not None else settings.grid_size),
        values=value_summary(grayscale(buf)),
        notan_threshold=cutoff,
        notan_white_ratio=white_ratio(notan(buf, cutoff)),
    )


def analyze_pair(
    reference: PixelBuffer,
    artwork: PixelBuffer,
    settings: AnalysisSettings = SETTINGS,
    *,
    sensitivity: Optional[int] = None,
    grid: Optional[int] = None,
    threshold: Optional[int] = None,
) -> PairReport:
    pair = prepare_pair(reference, artwork)
    sensitivity = settings.sensitivity if sensitivity is None else sensitivity
    return PairReport(
        reference=analyze_image(pair.reference, settings, grid, threshold),
        artwork=analyze_image(pair.artwork, settings, grid, threshold),
        accuracy=accuracy_heatmap(pair.reference_native, pair.artwork_native, sensitivity),
        coherence=coherence(pair.reference_native, pair.artwork_native),
    )


Tool = Callable[[PreparedPair, AnalysisSettings, Dict[str, Any]], Any]


def _per_image(fn: Callable[[PixelBuffer], Any]) -> Tool:
    def run(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
        return fn(pair.reference), fn(pair.artwork)

    return run


def _notan(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    cutoff = clamp_param("threshold", params.get("threshold", settings.threshold))
    return notan(pair.reference, cutoff), notan(pair.artwork, cutoff)


def _palette(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    count = int(params.get("count", settings.palette_count))
    return dominant_colors(pair.reference, count), dominant_colors(pair.artwork, count)


def _harmony(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    count = int(params.get("count", settings.harmony_count))
    return tuple(
        score_harmony([entry.color for entry in dominant_colors(buf, count)])
        for buf in (pair.reference, pair.artwork)
    )


def _accuracy(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    sensitivity = clamp_param("sensitivity", params.get("sensitivity", settings.sensitivity))
    return accuracy_heatmap(pair.reference_native, pair.artwork_native, sensitivity)


def _coherence(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    return coherence(pair.reference_native, pair.artwork_native)


def _entropy(pair: PreparedPair, settings: AnalysisSettings, params: Dict[str, Any]) -> Any:
    grid = clamp_param("grid", params.get("grid", settings.grid_size))
    return entropy_grid(pair.reference, grid), entropy_grid(pair.artwork, grid)


TOOLS: Dict[str, Tool] = {
    "grayscale": _per_image(grayscale),
    "notan": _notan,
    "edges": _per_image(sobel),
    "palette": _palette,
    "harmony": _harmony,
    "accuracy": _accuracy,
    "coherence": _coherence,
    "entropy": _entropy,
}


class AnalysisSession:
    """
    Staged analysis of one reference/artwork pair.

    Each computation is stamped with a generation token for its tool when it
    starts and is committed only if no newer run of the same tool has begun
    since. Replacing the images makes every tool's in-flight work stale; a
    newer run of one tool leaves the others untouched.
    """

    def __init__(
        self,
        reference: PixelBuffer,
        artwork: PixelBuffer,
        settings: AnalysisSettings = SETTINGS,
    ) -> None:
        self._settings = settings
        self._generations = {tool: GenerationCounter() for tool in TOOLS}
        self._pair = prepare_pair(reference, artwork)
        self._results: Dict[str, Any] = {}

    @property
    def pair(self) -> PreparedPair:
        return self._pair

    def _counter(self, tool: str) -> GenerationCounter:
        try:
            return self._generations[tool]
        except KeyError:
            raise ValueError(f"Unknown analysis tool: {tool!r}") from None

    def generation(self, tool: str) -> int:
        return self._counter(tool).current

    def begin(self, tool: str) -> int:
        return self._counter(tool).begin()

    def compute(self, tool: str, pair: PreparedPair, **params: Any) -> Any:
        try:
            handler = TOOLS[tool]
        except KeyError:
            raise ValueError(f"Unknown analysis tool: {tool!r}") from None
        return handler(pair, self._settings, params)

    def commit(self, token: int, tool: str, result: Any) -> bool:
        if not self._counter(tool).is_current(token):
            logger.debug(
                "discarding stale %s result (token %s, current %s)", tool, token, self.generation(tool)
            )
            return False
        self._results[tool] = result
        return True

    def run(self, tool: str, **params: Any) -> Optional[Any]:
        token = self.begin(tool)
        pair = self._pair
        result = self.compute(tool, pair, **params)
        return result if self.commit(token, tool, result) else None

    def update_images(self, reference: PixelBuffer, artwork: PixelBuffer) -> None:
        for counter in self._generations.values():
            counter.begin()
        self._pair = prepare_pair(reference, artwork)
        self._results = {}

    def result(self, tool: str) -> Optional[Any]:
        return self._results.get(tool)

    def tools(self) -> List[str]:
        return sorted(TOOLS)
