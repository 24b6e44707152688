from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Route, async_playwright

from .canvas import CanvasPlan
from .composite import SCREENSHOT_SELECTOR

logger = logging.getLogger(__name__)

JPEG_QUALITY = 95

BLOCKED_REQUEST_PATTERNS: tuple[str, ...] = (
    "https://runtime.fine.dev/error-overlay.js",
)

# Runs before any page script so captures are not taken mid-animation.
_DISABLE_MOTION_SCRIPT = """
(() => {
  const css = `*,*::before,*::after{transition-property:none!important;transition-duration:0s!important;transition-delay:0s!important;animation-name:none!important;animation-duration:0s!important;animation-delay:0s!important;animation-iteration-count:1!important;scroll-behavior:auto!important}::-webkit-scrollbar{display:none}body{-ms-overflow-style:none;scrollbar-width:none}`;
  const install = () => {
    const style = document.createElement("style");
    style.id = "disable-motion-style";
    style.append(document.createTextNode(css));
    document.documentElement.append(style);
  };
  if (document.documentElement) {
    install();
  } else {
    document.addEventListener("DOMContentLoaded", install, { once: true });
  }
})();
"""


@dataclass(frozen=True)
class CaptureTimeouts:
    page_load_ms: int = 60000
    html_load_ms: int = 30000
    final_image_wait_ms: int = 5000


class BrowserSession:
    """One headless Chromium process and its single page, owned by one request."""

    def __init__(self, browser: Any, page: Any, playwright: Any = None):
        self.browser = browser
        self.page = page
        self._playwright = playwright

    async def close(self) -> None:
        try:
            await self.browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()


async def launch_session() -> BrowserSession:
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(
            headless=True,
            args=[
                "--no-sandbox",
                "--disable-setuid-sandbox",
            ],
            ignore_default_args=["--disable-extensions"],
        )
    except BaseException:
        await playwright.stop()
        raise

    try:
        page = await browser.new_page(device_scale_factor=1)
    except BaseException:
        try:
            await browser.close()
        finally:
            await playwright.stop()
        raise

    return BrowserSession(browser, page, playwright)


class PageDriver:
    """Drives the two render phases on a session page: the target site, then the composite."""

    def __init__(
        self,
        page: Any,
        target_url: str,
        timeouts: CaptureTimeouts | None = None,
        blocked_patterns: tuple[str, ...] = BLOCKED_REQUEST_PATTERNS,
    ):
        self.page = page
        self.target_url = target_url
        self.timeouts = timeouts or CaptureTimeouts()
        self.blocked_patterns = blocked_patterns

    def _log(self, level: int, msg: str) -> None:
        logger.log(level, f"[{self.target_url}] {msg}")

    async def instrument(self) -> None:
        await self.page.add_init_script(script=_DISABLE_MOTION_SCRIPT)
        await self.page.route("**/*", self._filter_request)

    async def _filter_request(self, route: Route) -> None:
        request_url = route.request.url
        if any(pattern in request_url for pattern in self.blocked_patterns):
            await route.abort()
        else:
            await route.continue_()

    async def set_viewport(self, width: int, height: int) -> None:
        await self.page.set_viewport_size({"width": width, "height": height})

    async def navigate(self) -> bool:
        """Load the target page; returns False when both wait strategies failed."""
        self._log(logging.INFO, "Navigating to target...")
        try:
            await self.page.goto(self.target_url, wait_until="networkidle", timeout=self.timeouts.page_load_ms)
            return True
        except PlaywrightError as e:
            self._log(
                logging.WARNING,
                f"Navigation with networkidle failed (may be expected for SPAs): {e.message}. Trying load...",
            )

        try:
            await self.page.goto(self.target_url, wait_until="load", timeout=self.timeouts.page_load_ms)
            return True
        except PlaywrightError as e:
            self._log(logging.ERROR, f"Navigation failed completely: {e.message}. Capturing current state.")
            return False

    async def capture(self) -> bytes:
        return await self.page.screenshot(type="jpeg", quality=JPEG_QUALITY)

    async def capture_target(self, width: int, height: int) -> bytes:
        self._log(logging.INFO, f"Setting initial viewport: {width}x{height}")
        await self.set_viewport(width, height)
        await self.navigate()
        self._log(logging.INFO, "Taking initial screenshot...")
        return await self.capture()

    async def capture_composite(self, plan: CanvasPlan, html: str) -> bytes:
        self._log(logging.INFO, f"Setting final viewport: {plan.final_width}x{plan.final_height}")
        await self.set_viewport(plan.final_width, plan.final_height)

        await self.page.set_content(html, wait_until="load", timeout=self.timeouts.html_load_ms)
        self._log(logging.INFO, "HTML content loaded.")

        try:
            await self.page.wait_for_selector(
                SCREENSHOT_SELECTOR,
                state="visible",
                timeout=self.timeouts.final_image_wait_ms,
            )
        except PlaywrightError:
            self._log(logging.WARNING, f"Waiting for {SCREENSHOT_SELECTOR} timed out. Taking screenshot anyway.")

        self._log(logging.INFO, "Taking final screenshot...")
        return await self.capture()
