from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from None


def _cors_origins() -> list[str]:
    raw = os.getenv("SCREENSHOT_CORS_ORIGINS", "").strip()
    if not raw:
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    concurrency: int = 2
    acquire_timeout_s: float = 5.0
    # 0 disables the end-to-end deadline.
    request_timeout_s: float = 180.0

    background_fetch_timeout_s: float = 30.0
    page_load_timeout_ms: int = 60000
    html_load_timeout_ms: int = 30000
    final_image_wait_timeout_ms: int = 5000

    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=_env_number("PORT", "3000", int),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            concurrency=max(1, _env_number("SCREENSHOT_CONCURRENCY", "2", int)),
            acquire_timeout_s=_env_number("SCREENSHOT_ACQUIRE_TIMEOUT_S", "5.0", float),
            request_timeout_s=max(0.0, _env_number("SCREENSHOT_REQUEST_TIMEOUT_S", "180", float)),
            background_fetch_timeout_s=_env_number("BACKGROUND_FETCH_TIMEOUT_S", "30", float),
            page_load_timeout_ms=_env_number("PAGE_LOAD_TIMEOUT_MS", "60000", int),
            html_load_timeout_ms=_env_number("HTML_LOAD_TIMEOUT_MS", "30000", int),
            final_image_wait_timeout_ms=_env_number("FINAL_IMAGE_WAIT_TIMEOUT_MS", "5000", int),
            cors_origins=_cors_origins(),
        )
