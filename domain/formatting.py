from __future__ import annotations

import math

from domain.models import Color, LineHeight


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_px(value: float) -> str:
    return f"{format_number(value)}px"


def format_marker_value(value: float | int, unit: str = "") -> str:
    return f"{round_half_up(value)}{unit}"


def color_to_hex(color: Color) -> str:
    channels = (color.r, color.g, color.b)
    return "#" + "".join(f"{round_half_up(channel * 255):02X}" for channel in channels)


def color_to_rgb_text(color: Color) -> str:
    r, g, b = (round_half_up(channel * 255) for channel in (color.r, color.g, color.b))
    return f"rgb({r}, {g}, {b})"


def format_line_height(line_height: LineHeight) -> str:
    if line_height.unit == "AUTO" or line_height.value is None:
        return "Auto"
    suffix = "px" if line_height.unit == "PIXELS" else "%"
    return f"{format_number(line_height.value)}{suffix}"
