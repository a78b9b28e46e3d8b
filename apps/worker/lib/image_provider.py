"""
Remote placeholder-image provider.

Fetches a random raster from a picsum-style endpoint and re-encodes it as
JPEG, optionally resizing it first.
"""
from __future__ import annotations

import io
import logging
import os
import threading
from typing import Protocol

import requests
from PIL import Image, UnidentifiedImageError

from packages.shared.errors import ImageFetchFailed

IMAGE_BASE_URL = os.getenv("IMAGE_BASE_URL", "https://picsum.photos").rstrip("/")
IMAGE_TIMEOUT_SECONDS = float(os.getenv("IMAGE_TIMEOUT_SECONDS", "15"))
IMAGE_JPEG_QUALITY = int(os.getenv("IMAGE_JPEG_QUALITY", "80"))

logger = logging.getLogger(__name__)


class ImageProvider(Protocol):
    def fetch(self, seed: str) -> bytes:
        ...

    def close(self) -> None:
        ...


class PicsumImageProvider:
    """
    Without an injected session, each calling thread gets its own
    requests.Session; `close` releases all of them.
    """

    def __init__(
        self,
        width: int = 200,
        height: int = 150,
        resize_to: tuple[int, int] | None = None,
        base_url: str = IMAGE_BASE_URL,
        timeout: float = IMAGE_TIMEOUT_SECONDS,
        quality: int = IMAGE_JPEG_QUALITY,
        session: requests.Session | None = None,
    ):
        self.width = width
        self.height = height
        self.resize_to = resize_to
        self.base_url = base_url
        self.timeout = timeout
        self.quality = quality
        self.session = session
        self._local = threading.local()
        self._owned: list[requests.Session] = []
        self._lock = threading.Lock()

    def _session(self) -> requests.Session:
        if self.session is not None:
            return self.session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
            with self._lock:
                self._owned.append(session)
        return session

    def close(self) -> None:
        with self._lock:
            owned, self._owned = self._owned, []
        for session in owned:
            session.close()
        self._local = threading.local()

    def url_for(self, seed: str) -> str:
        return f"{self.base_url}/{self.width}/{self.height}?random={seed}"

    def fetch(self, seed: str) -> bytes:
        url = self.url_for(seed)
        try:
            resp = self._session().get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ImageFetchFailed(f"GET {url} failed: {exc}") from exc
        return encode_jpeg(resp.content, resize_to=self.resize_to, quality=self.quality)


def encode_jpeg(data: bytes, resize_to: tuple[int, int] | None = None, quality: int = IMAGE_JPEG_QUALITY) -> bytes:
    """Decode any raster Pillow understands and re-encode it as RGB JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGB")
            if resize_to:
                img = img.resize(resize_to)
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=quality)
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageFetchFailed(f"Image payload could not be decoded: {exc}") from exc
    return out.getvalue()


def report_image_provider() -> PicsumImageProvider:
    """Images embedded in the PDF reports."""
    return PicsumImageProvider(width=200, height=150)


def spreadsheet_image_provider() -> PicsumImageProvider:
    """Thumbnail embedded twice per step row in the workbook."""
    return PicsumImageProvider(width=100, height=80, resize_to=(70, 50))
