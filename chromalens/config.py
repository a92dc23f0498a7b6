import logging
import os
from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class AnalysisSettings:
    port: int
    log_level: str
    fetch_timeout: float
    fetch_retries: int
    cache_ttl: float
    cache_size: int
    threshold: int
    sensitivity: int
    grid_size: int
    palette_count: int
    harmony_count: int
    max_upload_mb: int

    @classmethod
    def from_env(cls) -> "AnalysisSettings":
        return cls(
            port=int(os.getenv("PORT", "5600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            fetch_timeout=float(os.getenv("FETCH_TIMEOUT", "10.0")),
            fetch_retries=int(os.getenv("FETCH_RETRIES", "2")),
            cache_ttl=float(os.getenv("CACHE_TTL", "30")),
            cache_size=int(os.getenv("CACHE_SIZE", "16")),
            threshold=int(os.getenv("THRESHOLD", "128")),
            sensitivity=int(os.getenv("SENSITIVITY", "30")),
            grid_size=int(os.getenv("GRID_SIZE", "8")),
            palette_count=int(os.getenv("PALETTE_COUNT", "7")),
            harmony_count=int(os.getenv("HARMONY_COUNT", "6")),
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "16")),
        )


SETTINGS = AnalysisSettings.from_env()


# Working resolutions: single-image tools, paired comparisons, and the
# coherence display pass.
SINGLE_BOUNDS: Tuple[int, int] = (600, 400)
PAIR_BOUNDS: Tuple[int, int] = (500, 400)
COHERENCE_DISPLAY_BOUNDS: Tuple[int, int] = (500, 350)
# Largest pair extent the multi-scale coherence pass reads before scaling.
COHERENCE_NATIVE_BOUNDS: Tuple[int, int] = (1000, 1000)

COHERENCE_SCALES: Tuple[Tuple[str, float], ...] = (
    ("Large (50%)", 0.5),
    ("Medium (30%)", 0.3),
    ("Small (15%)", 0.15),
)

PARAM_RANGES: Dict[str, Tuple[int, int]] = {
    "threshold": (0, 255),
    "sensitivity": (5, 100),
    "grid": (2, 20),
}


def clamp_param(name: str, value: int) -> int:
    low, high = PARAM_RANGES[name]
    return max(low, min(high, int(value)))


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("chromalens")
