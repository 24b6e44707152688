from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .backgrounds import BackgroundSelector, fetch_background, to_data_uri
from .canvas import plan_canvas
from .composite import build_composite_html
from .config import Settings
from .errors import ScreenshotGenerationError, ScreenshotServiceError
from .models import ScreenshotRequest
from .screenshot import BrowserSession, CaptureTimeouts, PageDriver, launch_session

logger = logging.getLogger(__name__)

BackgroundFetcher = Callable[[str], Awaitable[str]]
SessionLauncher = Callable[[], Awaitable[BrowserSession]]


class ScreenshotPipeline:
    """Produces one composited JPEG per request.

    Each run owns its own browser session. The session is closed exactly once
    on every exit path, including failures and deadline cancellation.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        selector: BackgroundSelector | None = None,
        fetcher: BackgroundFetcher | None = None,
        launcher: SessionLauncher = launch_session,
    ):
        self.settings = settings or Settings()
        self.selector = selector or BackgroundSelector()
        self.fetcher = fetcher or self._fetch_background
        self.launcher = launcher
        self.timeouts = CaptureTimeouts(
            page_load_ms=self.settings.page_load_timeout_ms,
            html_load_ms=self.settings.html_load_timeout_ms,
            final_image_wait_ms=self.settings.final_image_wait_timeout_ms,
        )

    async def _fetch_background(self, url: str) -> str:
        return await fetch_background(url, timeout_s=self.settings.background_fetch_timeout_s)

    async def run(self, req: ScreenshotRequest) -> bytes:
        deadline = self.settings.request_timeout_s
        if not deadline:
            return await self._run(req)
        try:
            return await asyncio.wait_for(self._run(req), timeout=deadline)
        except asyncio.TimeoutError as e:
            raise ScreenshotGenerationError(f"Screenshot generation timed out after {deadline:g}s") from e

    async def _run(self, req: ScreenshotRequest) -> bytes:
        prefix = f"[{req.url}]"
        background_url = self.selector.choose()

        try:
            logger.info(f"{prefix} Fetching background: {background_url}")
            background_uri = await self.fetcher(background_url)
            logger.info(f"{prefix} Background fetched.")

            return await self._render(req, background_uri)
        except ScreenshotServiceError:
            raise
        except Exception as e:
            raise ScreenshotGenerationError(str(e)) from e

    async def _render(self, req: ScreenshotRequest, background_uri: str) -> bytes:
        prefix = f"[{req.url}]"
        logger.info(f"{prefix} Launching browser...")
        session = await self.launcher()
        try:
            driver = PageDriver(session.page, req.url, self.timeouts)
            await driver.instrument()

            shot = await driver.capture_target(req.width, req.height)
            logger.info(f"{prefix} Initial screenshot taken.")

            plan = plan_canvas(req.width, req.height)
            logger.info(
                f"{prefix} Final canvas: {plan.final_width}x{plan.final_height}, "
                f"Effective screenshot: {plan.inner_width}x{plan.inner_height}"
            )
            html = build_composite_html(plan, background_uri, to_data_uri("image/jpeg", shot))

            result = await driver.capture_composite(plan, html)
            logger.info(f"{prefix} Final screenshot captured.")
            return result
        finally:
            logger.info(f"{prefix} Closing browser...")
            await session.close()
            logger.info(f"{prefix} Browser closed.")
