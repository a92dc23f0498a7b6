"""Infrastructure helpers for acquisition, caching and responses."""

from .cache import CACHE, ResultCache, digest
from .network import SourceFetcher, decode_image, get_fetcher
from .responses import png_bytes, report_json, send_png

__all__ = [
    "CACHE",
    "ResultCache",
    "digest",
    "SourceFetcher",
    "decode_image",
    "get_fetcher",
    "png_bytes",
    "report_json",
    "send_png",
]
