import asyncio

import pytest
from fastapi.testclient import TestClient

from fakes import FINAL_JPEG, FakeFetcher, FakeLauncher, FakePage, make_pipeline, navigation_error
from screenshot_composer.errors import BackgroundFetchError, ServiceBusyError
from screenshot_composer.main import BANNER, BrowserSlots, create_app


def client_for(settings, launcher: FakeLauncher, fetcher: FakeFetcher | None = None) -> TestClient:
    return TestClient(create_app(settings, make_pipeline(settings, launcher, fetcher)))


def test_index_banner(settings) -> None:
    client = client_for(settings, FakeLauncher())
    response = client.get("/")
    assert response.status_code == 200
    assert response.text == BANNER


def test_healthz(settings) -> None:
    response = client_for(settings, FakeLauncher()).get("/healthz")
    assert response.json() == {"ok": True}


def test_screenshot_success(settings) -> None:
    launcher = FakeLauncher()
    response = client_for(settings, launcher).get(
        "/screenshot", params={"url": "https://example.com", "width": "1024", "height": "600"}
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.content == FINAL_JPEG
    assert launcher.page.viewports[0] == {"width": 1024, "height": 600}
    assert launcher.browser.close_calls == 1


def test_bad_dimensions_fall_back_to_defaults(settings) -> None:
    launcher = FakeLauncher()
    response = client_for(settings, launcher).get(
        "/screenshot", params={"url": "https://example.com", "width": "-5", "height": "tall"}
    )
    assert response.status_code == 200
    assert launcher.page.viewports[0] == {"width": 1400, "height": 800}


def test_missing_url_is_client_error(settings) -> None:
    launcher = FakeLauncher()
    response = client_for(settings, launcher).get("/screenshot")
    assert response.status_code == 400
    assert response.text == "Missing required query parameter: url"
    assert launcher.launches == 0


def test_malformed_url_is_client_error(settings) -> None:
    launcher = FakeLauncher()
    fetcher = FakeFetcher()
    response = client_for(settings, launcher, fetcher).get("/screenshot", params={"url": "not a url"})
    assert response.status_code == 400
    assert response.text == "Invalid URL provided: not a url"
    assert launcher.launches == 0
    assert fetcher.urls == []


def test_background_failure_is_server_error(settings) -> None:
    launcher = FakeLauncher()
    fetcher = FakeFetcher(error=BackgroundFetchError("Background image fetch failed: 500"))
    response = client_for(settings, launcher, fetcher).get("/screenshot", params={"url": "https://example.com"})
    assert response.status_code == 500
    assert response.text == "Error generating screenshot: Background image fetch failed: 500"
    assert launcher.launches == 0


def test_navigation_failure_still_succeeds(settings) -> None:
    launcher = FakeLauncher(page=FakePage(goto_errors=[navigation_error(), navigation_error()]))
    response = client_for(settings, launcher).get("/screenshot", params={"url": "https://example.com"})
    assert response.status_code == 200
    assert response.content == FINAL_JPEG
    assert launcher.browser.close_calls == 1


def test_browser_failure_is_server_error(settings) -> None:
    launcher = FakeLauncher(error=RuntimeError(""))
    response = client_for(settings, launcher).get("/screenshot", params={"url": "https://example.com"})
    assert response.status_code == 500
    assert response.text == "Error generating screenshot: An internal error occurred"


def test_browser_slots_reject_when_saturated() -> None:
    slots = BrowserSlots(concurrency=1, acquire_timeout_s=0.01)

    async def go() -> None:
        async with slots.slot():
            with pytest.raises(ServiceBusyError):
                async with slots.slot():
                    pass
        # Released slot is usable again.
        async with slots.slot():
            pass

    asyncio.run(go())


def test_busy_service_returns_503(settings) -> None:
    app = create_app(settings, make_pipeline(settings, FakeLauncher()))

    class BusySlots:
        def slot(self):
            raise ServiceBusyError("Screenshot service busy. Please retry.")

    app.state.browser_slots = BusySlots()
    response = TestClient(app).get("/screenshot", params={"url": "https://example.com"})
    assert response.status_code == 503
    assert response.headers["retry-after"] == "2"


def test_oversized_dimension_falls_back_to_default(settings) -> None:
    launcher = FakeLauncher()
    response = client_for(settings, launcher).get(
        "/screenshot", params={"url": "https://example.com", "width": "9" * 5000}
    )
    assert response.status_code == 200
    assert launcher.page.viewports[0] == {"width": 1400, "height": 800}
