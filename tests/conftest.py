from __future__ import annotations

import pytest

from screenshot_composer.config import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(concurrency=1, acquire_timeout_s=0.05, request_timeout_s=5.0)
