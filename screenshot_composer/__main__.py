from __future__ import annotations

import logging

import uvicorn

from .main import app

logger = logging.getLogger(__name__)


def main() -> None:
    settings = app.state.settings
    logger.info(f"Screenshot server listening on http://{settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
