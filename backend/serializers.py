"""
Serializers - DesignData to text

Three pure output formats:
- JSON: the full record, indented by two spaces
- Markdown: a human-readable summary (measurements and fill colors only)
- Tagged markup ("claude"): XML-like elements for language-model prompts

The tagged format does not escape attribute or text content. Names
containing quotes or angle brackets produce malformed markup.
"""

import json
import logging
import math
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List

from design_types import (
    DesignData,
    OUTPUT_FORMAT_CLAUDE,
    OUTPUT_FORMAT_CLAUDE_TAGGED,
    OUTPUT_FORMAT_JSON,
    OUTPUT_FORMAT_MARKDOWN,
)

logger = logging.getLogger(__name__)


def _fmt_float(value: float) -> str:
    # Number-to-string rules of the plugin runtime: shortest round-trip
    # digits, plain notation for 1e-6 <= |value| < 1e21, exponent otherwise.
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    point = exponent + len(digits)
    digits = digits.rstrip("0")
    prefix = "-" if sign else ""

    if len(digits) <= point <= 21:
        return prefix + digits + "0" * (point - len(digits))
    if 0 < point <= 21:
        return prefix + digits[:point] + "." + digits[point:]
    if -6 < point <= 0:
        return prefix + "0." + "0" * -point + digits
    mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
    power = point - 1
    return f"{prefix}{mantissa}e{'+' if power > 0 else '-'}{abs(power)}"


def _fmt(value: Any) -> str:
    """Render a value the way the plugin's string templates do (100.0 -> "100", 1e-07 -> "1e-7")."""
    if value is None:
        return "undefined"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _fmt_float(value)
    return str(value)


def _format_export_time(timestamp: str) -> str:
    """M/D/YYYY, h:mm:ss AM|PM in the timestamp's own (UTC) time."""
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return "Invalid Date"
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment.year}, {hour}:{moment.minute:02d}:{moment.second:02d} {meridiem}"


def format_as_json(design_data: DesignData) -> str:
    return json.dumps(design_data.to_dict(), indent=2, ensure_ascii=False)


def format_as_markdown(design_data: DesignData) -> str:
    """Markdown summary. Typography and structure are not rendered in this format."""
    parts: List[str] = [
        "# Design Specifications\n\n",
        f"Exported on: {_format_export_time(design_data.timestamp)}\n\n",
    ]

    for node in design_data.nodes:
        parts.append(f"## {node.name} ({node.type})\n\n")

        if node.screenshot:
            parts.append(f"![{node.name}]({node.screenshot})\n\n")

        m = node.measurements
        if m is not None:
            parts.append("### Measurements\n\n")
            parts.append(f"- Position: X: {_fmt(m.x)}, Y: {_fmt(m.y)}\n")
            parts.append(f"- Size: Width: {_fmt(m.width)}, Height: {_fmt(m.height)}\n")
            if m.rotation:
                parts.append(f"- Rotation: {_fmt(m.rotation)}°\n")
            parts.append("\n")

        if node.styles is not None and node.styles.fills:
            parts.append("### Colors\n\n")
            for fill in node.styles.fills:
                if fill.color is not None:
                    parts.append(f"- {fill.color.hex}\n")
            parts.append("\n")

    return "".join(parts)


def format_as_tagged(design_data: DesignData) -> str:
    """XML-like markup, one <component> per node inside <design_specs>."""
    lines: List[str] = ["<design_specs>"]

    for node in design_data.nodes:
        lines.append(f'  <component name="{node.name}" type="{node.type}">')

        if node.screenshot:
            lines.append(f"    <screenshot>{node.screenshot}</screenshot>")

        m = node.measurements
        if m is not None:
            lines.append("    <measurements>")
            lines.append(f'      <position x="{_fmt(m.x)}" y="{_fmt(m.y)}" />')
            lines.append(f'      <size width="{_fmt(m.width)}" height="{_fmt(m.height)}" />')
            if m.rotation:
                lines.append(f"      <rotation>{_fmt(m.rotation)}</rotation>")
            if m.padding is not None:
                attrs = "".join(
                    f' {side}="{_fmt(getattr(m.padding, side))}"'
                    for side in ("top", "right", "bottom", "left")
                    if getattr(m.padding, side) is not None
                )
                lines.append(f"      <padding{attrs} />")
            lines.append("    </measurements>")

        styles = node.styles
        if styles is not None:
            lines.append("    <styles>")
            if styles.fills:
                lines.append("      <fills>")
                for fill in styles.fills:
                    lines.append(f'        <fill type="{fill.type}">')
                    if fill.color is not None:
                        c = fill.color
                        lines.append(
                            f'          <color hex="{c.hex}" r="{_fmt(c.r)}" g="{_fmt(c.g)}" b="{_fmt(c.b)}" a="{_fmt(c.a)}" />'
                        )
                    lines.append("        </fill>")
                lines.append("      </fills>")
            typography = styles.typography
            if typography is not None:
                lines.append("      <typography>")
                lines.append(
                    f'        <font family="{typography.font_family}" size="{_fmt(typography.font_size)}" weight="{_fmt(typography.font_weight)}" />'
                )
                lines.append(f'        <color hex="{typography.color.hex}" />')
                lines.append("      </typography>")
            lines.append("    </styles>")

        structure = node.structure
        if structure is not None:
            lines.append("    <structure>")
            if structure.is_auto_layout:
                attrs = ""
                if structure.layout_mode:
                    attrs += f' mode="{structure.layout_mode}"'
                if structure.item_spacing is not None:
                    attrs += f' spacing="{_fmt(structure.item_spacing)}"'
                lines.append(f"      <autoLayout{attrs} />")
            lines.append("    </structure>")

        lines.append("  </component>")

    lines.append("</design_specs>")
    return "\n".join(lines)


SERIALIZERS: Dict[str, Callable[[DesignData], str]] = {
    OUTPUT_FORMAT_JSON: format_as_json,
    OUTPUT_FORMAT_MARKDOWN: format_as_markdown,
    OUTPUT_FORMAT_CLAUDE: format_as_tagged,
    OUTPUT_FORMAT_CLAUDE_TAGGED: format_as_tagged,
}


def serialize(design_data: DesignData, output_format: str) -> str:
    """Serialize with the requested format; unknown formats fall back to JSON."""
    serializer = SERIALIZERS.get(output_format)
    if serializer is None:
        logger.warning(f"⚠️ Unknown output format '{output_format}', falling back to JSON")
        serializer = format_as_json
    return serializer(design_data)
