from __future__ import annotations

import re
from urllib.parse import urlparse, urlunparse

from pydantic import BaseModel, Field

from .errors import InvalidRequestError

DEFAULT_VIEWPORT_WIDTH = 1400
DEFAULT_VIEWPORT_HEIGHT = 800

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z\d+.-]*://")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def normalize_target_url(raw: str | None) -> str:
    if raw is None or not raw.strip():
        raise InvalidRequestError("Missing required query parameter: url")

    value = raw.strip()
    if not _SCHEME_RE.match(value):
        raise InvalidRequestError(f"Invalid URL provided: {raw}")
    try:
        parsed = urlparse(value)
        # Accessing .port validates it.
        parsed.port
    except ValueError as e:
        raise InvalidRequestError(f"Invalid URL provided: {raw}") from e
    if not parsed.hostname or any(c.isspace() for c in value):
        raise InvalidRequestError(f"Invalid URL provided: {raw}")

    return urlunparse(parsed._replace(path=parsed.path or "/"))


def parse_dimension(raw: str | None, default: int) -> int:
    """Read the leading integer of a query value, falling back to ``default``."""
    if raw is None:
        return default
    m = _LEADING_INT_RE.match(raw)
    if not m:
        return default
    try:
        value = int(m.group(1))
    except ValueError:
        # Beyond the interpreter's integer-string digit limit.
        return default
    return value if value > 0 else default


class ScreenshotRequest(BaseModel):
    url: str = Field(..., min_length=1)
    width: int = Field(DEFAULT_VIEWPORT_WIDTH, gt=0)
    height: int = Field(DEFAULT_VIEWPORT_HEIGHT, gt=0)

    @classmethod
    def from_query(
        cls,
        url: str | None,
        width: str | None = None,
        height: str | None = None,
    ) -> "ScreenshotRequest":
        return cls(
            url=normalize_target_url(url),
            width=parse_dimension(width, DEFAULT_VIEWPORT_WIDTH),
            height=parse_dimension(height, DEFAULT_VIEWPORT_HEIGHT),
        )
