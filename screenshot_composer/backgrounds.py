from __future__ import annotations

import base64
import logging
import random
from typing import Sequence

import httpx

from .errors import BackgroundFetchError

logger = logging.getLogger(__name__)

_BUCKET = "https://pub-f05b78f7221549728707593770f5daa7.r2.dev"

BACKGROUND_URLS: tuple[str, ...] = (
    f"{_BUCKET}/Rectangle-1.jpg",
    f"{_BUCKET}/Rectangle.jpg",
    f"{_BUCKET}/Rectangle-10.jpg",
    f"{_BUCKET}/Rectangle-11.jpg",
    f"{_BUCKET}/Rectangle-12.jpg",
    f"{_BUCKET}/Rectangle-13.jpg",
    f"{_BUCKET}/Rectangle-14.jpg",
    f"{_BUCKET}/Rectangle-15.jpg",
    f"{_BUCKET}/Rectangle-16.jpg",
    f"{_BUCKET}/Rectangle-2.jpg",
    f"{_BUCKET}/Rectangle-3.jpg",
    f"{_BUCKET}/Rectangle-4.jpg",
    f"{_BUCKET}/Rectangle-5.jpg",
    f"{_BUCKET}/Rectangle-6.jpg",
    f"{_BUCKET}/Rectangle-7.jpg",
    f"{_BUCKET}/Rectangle-8.jpg",
    f"{_BUCKET}/Rectangle-9.jpg",
)

_DEFAULT_CONTENT_TYPE = "image/jpeg"


class BackgroundSelector:
    def __init__(self, catalog: Sequence[str] = BACKGROUND_URLS, rng: random.Random | None = None):
        if not catalog:
            raise ValueError("Background catalog must not be empty.")
        self.catalog = tuple(catalog)
        self._rng = rng or random.Random()

    def choose(self) -> str:
        return self._rng.choice(self.catalog)


def to_data_uri(content_type: str, data: bytes) -> str:
    return f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"


def _effective_content_type(raw: str | None) -> str:
    content_type = (raw or "").strip() or _DEFAULT_CONTENT_TYPE
    if not content_type.startswith("image/"):
        return _DEFAULT_CONTENT_TYPE
    return content_type


async def fetch_background(
    url: str,
    *,
    timeout_s: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Download a background image and return it as a ``data:`` URI."""
    try:
        async with httpx.AsyncClient(timeout=timeout_s, follow_redirects=True, transport=transport) as client:
            res = await client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Error fetching background {url}: {e}")
        raise BackgroundFetchError(f"Background image fetch failed: {e}") from e

    if not res.is_success:
        logger.error(f"Error fetching background {url}: HTTP {res.status_code}")
        raise BackgroundFetchError(
            f"Background image fetch failed: Failed background fetch ({url}): {res.status_code}"
        )

    return to_data_uri(_effective_content_type(res.headers.get("content-type")), res.content)
