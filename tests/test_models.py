import pytest

from screenshot_composer.errors import InvalidRequestError
from screenshot_composer.models import ScreenshotRequest, normalize_target_url, parse_dimension


def test_from_query_defaults() -> None:
    req = ScreenshotRequest.from_query("https://example.com/page")
    assert req.url == "https://example.com/page"
    assert (req.width, req.height) == (1400, 800)


def test_url_gets_root_path() -> None:
    assert normalize_target_url("https://example.com") == "https://example.com/"


def test_url_keeps_query_and_port() -> None:
    assert normalize_target_url("http://localhost:5173/app?x=1") == "http://localhost:5173/app?x=1"


@pytest.mark.parametrize("raw", [None, ""])
def test_missing_url(raw) -> None:
    with pytest.raises(InvalidRequestError) as excinfo:
        normalize_target_url(raw)
    assert excinfo.value.message == "Missing required query parameter: url"
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize(
    "raw",
    [
        "not a url",
        "example.com",
        "https://",
        "http://exa mple.com",
        "http://host:99999/",
        "about:blank",
        "file:///etc/hosts",
        "data:text/html,hello",
    ],
)
def test_malformed_url(raw: str) -> None:
    with pytest.raises(InvalidRequestError) as excinfo:
        normalize_target_url(raw)
    assert excinfo.value.message == f"Invalid URL provided: {raw}"


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, 1400),
        ("", 1400),
        ("abc", 1400),
        ("0", 1400),
        ("-20", 1400),
        ("1024", 1024),
        (" 640", 640),
        ("1200px", 1200),
        ("+300", 300),
        ("9" * 5000, 1400),
    ],
)
def test_parse_dimension(raw, expected: int) -> None:
    assert parse_dimension(raw, 1400) == expected
