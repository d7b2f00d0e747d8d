"""
Styles Extractor

Fills, strokes, effects and typography of a node. Each part is extracted on
its own and left out (None) when the node has nothing to report for it;
empty lists are never emitted.
"""

import logging
from typing import List, Optional

from figma_nodes import Paint, SceneNode
from design_types import (
    Color,
    EffectStyle,
    FillStyle,
    GradientStop,
    Offset,
    StrokeStyle,
    StylesData,
    TypographyStyle,
)
from color_utils import to_color

logger = logging.getLogger(__name__)

GRADIENT_TYPES = frozenset({
    "GRADIENT_LINEAR",
    "GRADIENT_RADIAL",
    "GRADIENT_ANGULAR",
    "GRADIENT_DIAMOND",
})

IMAGE_PLACEHOLDER = "[Image data not available in plugin context]"

# Gradient and image strokes are not resolved; they report opaque black.
_UNRESOLVED_STROKE_COLOR = Color(r=0, g=0, b=0, a=1, hex="#000000")

# Checked in order; the first match wins.
_FONT_WEIGHTS = (
    ("Bold", 700),
    ("Medium", 500),
    ("Light", 300),
)
DEFAULT_FONT_WEIGHT = 400


def infer_font_weight(style: str) -> int:
    """Numeric weight for a font style name such as "Bold Italic"."""
    for keyword, weight in _FONT_WEIGHTS:
        if keyword in style:
            return weight
    return DEFAULT_FONT_WEIGHT


def _fill_style(fill: Paint) -> FillStyle:
    fill_style = FillStyle(type=fill.type)

    if fill.type == "SOLID":
        fill_style.color = to_color(fill.color)
    elif fill.type in GRADIENT_TYPES:
        if fill.gradient_stops is not None:
            fill_style.gradient_stops = [
                GradientStop(position=stop.position, color=to_color(stop.color))
                for stop in fill.gradient_stops
            ]
    elif fill.type == "IMAGE":
        fill_style.image_url = IMAGE_PLACEHOLDER
        fill_style.scale_mode = fill.scale_mode

    return fill_style


def extract_fills(node: SceneNode) -> Optional[List[FillStyle]]:
    if not node.fills:
        return None
    return [_fill_style(fill) for fill in node.fills]


def extract_strokes(node: SceneNode) -> Optional[List[StrokeStyle]]:
    """
    Stroke paints of a node.

    Weight, alignment and dash pattern live on the node, not on the paint,
    so every entry repeats them.
    """
    if not node.strokes or not node.has("stroke_weight") or not node.has("stroke_align"):
        return None

    dash_pattern = list(node.dash_pattern) if node.dash_pattern else None

    strokes = []
    for stroke in node.strokes:
        color = to_color(stroke.color) if stroke.type == "SOLID" else _UNRESOLVED_STROKE_COLOR.model_copy()
        strokes.append(StrokeStyle(
            color=color,
            weight=node.stroke_weight,
            alignment=node.stroke_align,
            dash_pattern=dash_pattern,
        ))
    return strokes


def extract_effects(node: SceneNode) -> Optional[List[EffectStyle]]:
    if not node.effects:
        return None

    effects = []
    for effect in node.effects:
        effect_style = EffectStyle(type=effect.type)
        if effect.radius is not None:
            effect_style.radius = effect.radius
        if effect.color is not None:
            effect_style.color = to_color(effect.color)
        if effect.offset is not None:
            effect_style.offset = Offset(x=effect.offset.x or 0, y=effect.offset.y or 0)
        if effect.spread is not None:
            effect_style.spread = effect.spread
        effects.append(effect_style)
    return effects


def extract_typography(node: SceneNode) -> Optional[TypographyStyle]:
    """
    Font settings of a TEXT node with a font name, a font size and at least
    one fill. The text color comes from the first fill, which is expected
    to be solid.
    """
    if node.type != "TEXT" or not node.has("font_name") or not node.has("font_size"):
        return None
    if not node.fills:
        return None

    typography = TypographyStyle(
        font_family=node.font_name.family,
        font_size=node.font_size,
        font_weight=infer_font_weight(node.font_name.style),
        color=to_color(node.fills[0].color),
    )

    if node.has("letter_spacing"):
        typography.letter_spacing = node.letter_spacing
    if node.has("line_height"):
        typography.line_height = node.line_height
    if node.has("text_align_horizontal"):
        typography.text_align = node.text_align_horizontal
    if node.has("text_case"):
        typography.text_case = node.text_case
    if node.has("text_decoration"):
        typography.text_decoration = node.text_decoration

    return typography


def extract_styles(node: SceneNode) -> StylesData:
    styles = StylesData(
        fills=extract_fills(node),
        strokes=extract_strokes(node),
        effects=extract_effects(node),
        typography=extract_typography(node),
    )
    logger.debug(f"🎨 Styles for {node.id}: {sorted(styles.to_dict())}")
    return styles
