from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response

from dotenv import load_dotenv

from .config import Settings
from .errors import ScreenshotServiceError, ServiceBusyError
from .models import ScreenshotRequest
from .pipeline import ScreenshotPipeline

# Load environment variables from the project root .env (real environment wins)
_HERE = Path(__file__).resolve()
_PROJECT_ROOT = _HERE.parents[1]
load_dotenv(_PROJECT_ROOT / ".env", override=False)

logger = logging.getLogger(__name__)

BANNER = "Screenshot Service is running. Use /screenshot?url=..."
CACHE_CONTROL = "public, max-age=3600"


class BrowserSlots:
    """Bounds how many browser pipelines run at once."""

    def __init__(self, concurrency: int, acquire_timeout_s: float):
        self._semaphore = asyncio.Semaphore(max(1, concurrency))
        self.acquire_timeout_s = acquire_timeout_s

    @asynccontextmanager
    async def slot(self):
        try:
            await asyncio.wait_for(self._semaphore.acquire(), timeout=self.acquire_timeout_s)
        except asyncio.TimeoutError:
            raise ServiceBusyError(
                "Screenshot service busy (too many concurrent browser sessions). Please retry."
            )
        try:
            yield
        finally:
            self._semaphore.release()


async def _service_error_handler(request: Request, exc: ScreenshotServiceError) -> PlainTextResponse:
    if isinstance(exc, ServiceBusyError):
        return PlainTextResponse(
            exc.message,
            status_code=exc.status_code,
            headers={"Retry-After": str(exc.retry_after_s)},
        )
    if exc.status_code < 500:
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return PlainTextResponse(
        f"Error generating screenshot: {exc.message or 'An internal error occurred'}",
        status_code=exc.status_code,
    )


def create_app(settings: Settings | None = None, pipeline: ScreenshotPipeline | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Screenshot Composer", version="0.1.0")
    app.state.settings = settings
    app.state.pipeline = pipeline or ScreenshotPipeline(settings)
    app.state.browser_slots = BrowserSlots(settings.concurrency, settings.acquire_timeout_s)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ScreenshotServiceError, _service_error_handler)

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return BANNER

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    @app.get("/screenshot")
    async def screenshot_endpoint(
        request: Request,
        url: str | None = None,
        width: str | None = None,
        height: str | None = None,
    ):
        req = ScreenshotRequest.from_query(url, width, height)
        logger.info(f"Received request for URL: {req.url}, Size: {req.width}x{req.height}")

        try:
            async with request.app.state.browser_slots.slot():
                image = await request.app.state.pipeline.run(req)
        except ServiceBusyError:
            logger.warning(f"[{req.url}] Rejected: no free browser slot.")
            raise
        except ScreenshotServiceError:
            logger.exception(f"[{req.url}] Failed to process screenshot request")
            raise

        logger.info(f"Successfully sent screenshot for {req.url}")
        return Response(content=image, media_type="image/jpeg", headers={"Cache-Control": CACHE_CONTROL})

    return app


app = create_app()
