"""
Design Types - Export Records

Plain data records produced by the extractors and consumed by the
serializers. Field declaration order is the key order of the JSON output;
absent optional fields are omitted on dump.
"""

from typing import Any, Dict, List, Mapping, Optional, Union
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Number = Union[int, float]

OUTPUT_FORMAT_JSON = "json"
OUTPUT_FORMAT_MARKDOWN = "markdown"
OUTPUT_FORMAT_CLAUDE = "claude"
OUTPUT_FORMAT_CLAUDE_TAGGED = "claude-tagged"


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def is_empty(self) -> bool:
        return not self.to_dict()


class ExportOptions(_Record):
    """What to extract and how to serialize it. Frozen for the duration of one export."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)

    include_screenshot: bool = True
    include_hierarchy: bool = True
    include_measurements: bool = True
    include_styles: bool = True
    include_structure: bool = True
    output_format: str = OUTPUT_FORMAT_CLAUDE


DEFAULT_OPTIONS = ExportOptions()

_OPTION_FIELDS_BY_ALIAS = {field.alias: name for name, field in ExportOptions.model_fields.items()}


def merge_options(overrides: Optional[Mapping[str, Any]] = None) -> ExportOptions:
    """
    Merge caller overrides over DEFAULT_OPTIONS; the caller's value wins per key.

    Keys may be camelCase (as sent by the plugin UI) or snake_case. Unknown
    keys are ignored.
    """
    merged = DEFAULT_OPTIONS.model_dump()
    for key, value in (overrides or {}).items():
        name = key if key in ExportOptions.model_fields else _OPTION_FIELDS_BY_ALIAS.get(key)
        if name is not None:
            merged[name] = value
    return ExportOptions.model_validate(merged)


class Color(_Record):
    r: Number
    g: Number
    b: Number
    a: Number
    hex: str


class HierarchyData(_Record):
    parent: Optional[str] = None
    children: Optional[List[str]] = None
    component_properties: Optional[Dict[str, Any]] = None
    variant_properties: Optional[Dict[str, str]] = None


class Spacing(_Record):
    top: Optional[Number] = None
    right: Optional[Number] = None
    bottom: Optional[Number] = None
    left: Optional[Number] = None


class MeasurementsData(_Record):
    x: Number
    y: Number
    width: Number
    height: Number
    rotation: Optional[Number] = None
    padding: Optional[Spacing] = None
    # Inferred from sibling geometry; an approximation, not host data.
    margin: Optional[Spacing] = None


class GradientStop(_Record):
    position: Number
    color: Color


class FillStyle(_Record):
    type: str
    color: Optional[Color] = None
    gradient_stops: Optional[List[GradientStop]] = None
    image_url: Optional[str] = None
    scale_mode: Optional[str] = None


class StrokeStyle(_Record):
    color: Color
    weight: Any
    alignment: str
    dash_pattern: Optional[List[Number]] = None


class Offset(_Record):
    x: Number
    y: Number


class EffectStyle(_Record):
    type: str
    radius: Optional[Number] = None
    color: Optional[Color] = None
    offset: Optional[Offset] = None
    spread: Optional[Number] = None


class TypographyStyle(_Record):
    font_family: str
    font_size: Any
    font_weight: int
    letter_spacing: Optional[Any] = None
    line_height: Optional[Any] = None
    text_align: Optional[str] = None
    text_case: Optional[str] = None
    text_decoration: Optional[str] = None
    color: Color


class StylesData(_Record):
    fills: Optional[List[FillStyle]] = None
    strokes: Optional[List[StrokeStyle]] = None
    effects: Optional[List[EffectStyle]] = None
    typography: Optional[TypographyStyle] = None


class Constraints(_Record):
    horizontal: str
    vertical: str


class StructureData(_Record):
    layout_mode: Optional[str] = None
    layout_align: Optional[str] = None
    layout_grow: Optional[Number] = None
    primary_axis_sizing_mode: Optional[str] = None
    counter_axis_sizing_mode: Optional[str] = None
    primary_axis_align_items: Optional[str] = None
    counter_axis_align_items: Optional[str] = None
    padding_left: Optional[Number] = None
    padding_right: Optional[Number] = None
    padding_top: Optional[Number] = None
    padding_bottom: Optional[Number] = None
    item_spacing: Optional[Number] = None
    constraints: Optional[Constraints] = None
    responsive_resize: Optional[bool] = None
    is_auto_layout: bool = False


class NodeData(_Record):
    id: str
    name: str
    type: str
    screenshot: Optional[str] = None
    hierarchy: Optional[HierarchyData] = None
    measurements: Optional[MeasurementsData] = None
    styles: Optional[StylesData] = None
    structure: Optional[StructureData] = None


class DesignData(_Record):
    timestamp: str
    nodes: List[NodeData] = []
