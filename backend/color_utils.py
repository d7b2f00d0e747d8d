"""
Color conversion from the host's linear-unit RGB(A) to hex.

Channels are expected in [0, 1]. Nothing is clamped: out-of-range input
produces whatever the hex formatting yields, so callers must pass host
colors through unchanged.
"""

import math
from typing import Any

from design_types import Color


def _channel_to_hex(value: float) -> str:
    # Half-up rounding, matching the host's Math.round.
    return format(math.floor(value * 255 + 0.5), "x").zfill(2)


def rgba_to_hex(r: float, g: float, b: float, a: float = 1) -> str:
    """`#rrggbb`, or `#rrggbbaa` when the color is not fully opaque."""
    hex_value = f"#{_channel_to_hex(r)}{_channel_to_hex(g)}{_channel_to_hex(b)}"
    if a != 1:
        hex_value += _channel_to_hex(a)
    return hex_value


def to_color(color: Any) -> Color:
    """Convert a host RGB/RGBA value into a Color record. Missing alpha means opaque."""
    a = color.a if color.a is not None else 1
    return Color(r=color.r, g=color.g, b=color.b, a=a, hex=rgba_to_hex(color.r, color.g, color.b, a))
