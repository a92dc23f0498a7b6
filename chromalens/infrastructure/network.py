from __future__ import annotations

import io
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Tuple
from urllib.parse import urlsplit

import requests
from PIL import Image, UnidentifiedImageError

from ..config import SETTINGS
from ..errors import DecodeError, InvalidImageError
from ..processing.buffer import PixelBuffer

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]


def decode_image(data: bytes) -> PixelBuffer:
    """Decode encoded image bytes (PNG, JPEG, ...) into an RGBA buffer."""
    if not data:
        raise DecodeError("Empty image payload")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return PixelBuffer.from_image(img)
    except InvalidImageError:
        raise
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        logger.error("Failed to decode image: %s", exc)
        raise DecodeError(f"Failed to decode image: {exc}") from exc


def _validate_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise DecodeError(f"Invalid image URL: {url}")
    return url


class SourceFetcher:
    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or requests.Session
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": "chromalens/1.0"})
        return session

    def fetch_bytes(self, url: str) -> bytes:
        target = _validate_url(url)
        last_exception: Exception | None = None
        attempts = SETTINGS.fetch_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.get(target, timeout=SETTINGS.fetch_timeout)
                response.raise_for_status()
                return response.content
            except requests.RequestException as exc:
                last_exception = exc
                logger.warning("Fetch attempt %s for %s failed: %s", attempt, target, exc)
                if attempt < attempts:
                    time.sleep(0.4 * attempt)
        raise DecodeError(f"Could not fetch {target}: {last_exception}")

    def fetch_image(self, url: str) -> PixelBuffer:
        return decode_image(self.fetch_bytes(url))

    def fetch_pair(self, reference_url: str, artwork_url: str) -> Tuple[PixelBuffer, PixelBuffer]:
        with ThreadPoolExecutor(max_workers=2) as pool:
            ref_future = pool.submit(self.fetch_image, reference_url)
            art_future = pool.submit(self.fetch_image, artwork_url)
            return ref_future.result(), art_future.result()


_FETCHER: Optional[SourceFetcher] = None


def get_fetcher() -> SourceFetcher:
    global _FETCHER
    if _FETCHER is None:
        _FETCHER = SourceFetcher()
    return _FETCHER
