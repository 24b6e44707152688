from __future__ import annotations

from string import Template

from .canvas import CanvasPlan

SCREENSHOT_SELECTOR = "img#screenshot"

_COMPOSITE_TEMPLATE = Template(
    "<!DOCTYPE html><html><head><meta charset=\"UTF-8\"><title>Screenshot</title><style>\n"
    "html, body { margin: 0; padding: 0; width: ${width}px; height: ${height}px; "
    "overflow: hidden; background-color: #FFF; }\n"
    "body { display: flex; justify-content: center; align-items: center; "
    "background-image: url('${background}'); background-size: cover; "
    "background-position: center; background-repeat: no-repeat; }\n"
    "img#screenshot { display: block; width: ${inner_width}px; height: ${inner_height}px; "
    "box-shadow: 0 10px 30px rgba(0,0,0,0.35); object-fit: cover; }\n"
    "</style></head><body>"
    "<img id=\"screenshot\" src=\"${screenshot}\" alt=\"Website Screenshot\">"
    "</body></html>"
)


def build_composite_html(plan: CanvasPlan, background_uri: str, screenshot_uri: str) -> str:
    return _COMPOSITE_TEMPLATE.substitute(
        width=plan.final_width,
        height=plan.final_height,
        inner_width=plan.inner_width,
        inner_height=plan.inner_height,
        background=background_uri,
        screenshot=screenshot_uri,
    )
