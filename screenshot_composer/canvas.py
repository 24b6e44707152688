from __future__ import annotations

import math
from dataclasses import dataclass

PADDING = 60
MAX_WIDTH = 4096
MAX_HEIGHT = 4096


@dataclass(frozen=True)
class CanvasPlan:
    final_width: int
    final_height: int
    inner_width: int
    inner_height: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def plan_canvas(
    viewport_width: int,
    viewport_height: int,
    *,
    padding: int = PADDING,
    max_width: int = MAX_WIDTH,
    max_height: int = MAX_HEIGHT,
) -> CanvasPlan:
    """Size the composite canvas around a screenshot of the given viewport.

    Width is capped first and height second, each against the value left by
    the previous step. Reference outputs depend on that order.
    """
    if viewport_width <= 0 or viewport_height <= 0:
        raise ValueError("Viewport dimensions must be positive.")

    final_width = viewport_width + padding * 2
    final_height = viewport_height + padding * 2

    width = final_width
    height = final_height
    inner_width = viewport_width
    inner_height = viewport_height

    if width > max_width:
        scale = max_width / width
        width = max_width
        height = max(1, _round_half_up(height * scale))
        inner_width = _round_half_up(inner_width * scale)
        inner_height = _round_half_up(inner_height * scale)

    if height > max_height:
        scale = max_height / height
        height = max_height
        width = max(1, _round_half_up(width * scale))
        # Padding shrinks in proportion to the uncapped canvas.
        inner_width = _round_half_up(width - padding * 2 * (width / final_width))
        inner_height = _round_half_up(height - padding * 2 * (height / final_height))

    return CanvasPlan(
        final_width=width,
        final_height=height,
        inner_width=max(1, inner_width),
        inner_height=max(1, inner_height),
    )
