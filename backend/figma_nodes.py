"""
Figma Nodes - Host Node Model

This module models the nodes the Figma plugin serializes out of the current
selection. Every optional attribute group is an explicit Optional field, so
extractors ask the node whether it exposes an attribute instead of poking at
the raw payload.

The plugin sends camelCase attribute names (paddingLeft, fontName, ...);
both camelCase and snake_case are accepted. Unknown attributes are ignored.
"""

import logging
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, PrivateAttr
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

Number = Union[int, float]


class _HostModel(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True, alias_generator=to_camel)


class RGBA(_HostModel):
    """Linear-unit color as the host stores it. `a` is absent on plain RGB."""
    r: Number
    g: Number
    b: Number
    a: Optional[Number] = None

class ColorStop(_HostModel):
    position: Number
    color: RGBA

class Paint(_HostModel):
    type: str
    color: Optional[RGBA] = None
    gradient_stops: Optional[List[ColorStop]] = None
    scale_mode: Optional[str] = None
    opacity: Optional[Number] = None
    visible: Optional[bool] = None

class Vector(_HostModel):
    x: Optional[Number] = None
    y: Optional[Number] = None

class Effect(_HostModel):
    type: str
    radius: Optional[Number] = None
    color: Optional[RGBA] = None
    offset: Optional[Vector] = None
    spread: Optional[Number] = None
    visible: Optional[bool] = None

class FontName(_HostModel):
    family: str
    style: str

class Constraints(_HostModel):
    horizontal: str
    vertical: str


class _NodeBase(_HostModel):
    _parent: Optional["ParentNode"] = PrivateAttr(default=None)

    @property
    def parent(self) -> Optional["ParentNode"]:
        """Back-reference to the containing node. Not owned by this node."""
        return self._parent

    def has(self, attr: str) -> bool:
        """True when the node exposes `attr` with a non-null value."""
        return getattr(self, attr, None) is not None

    def has_number(self, attr: str) -> bool:
        """True when the node exposes `attr` as a plain number."""
        value = getattr(self, attr, None)
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    def index_in_parent(self) -> int:
        """Position among the parent's children (matched by id), or -1."""
        if self._parent is None or self._parent.children is None:
            return -1
        for index, sibling in enumerate(self._parent.children):
            if sibling.id == self.id:
                return index
        return -1


class SceneNode(_NodeBase):
    """
    A read-only design node supplied by the host.

    Identity and geometry are always present. Everything else depends on the
    concrete node kind and must be checked with `has()` / `has_number()`
    before use; no two optional groups are assumed to co-occur.
    """

    id: str
    name: str
    type: str
    x: Number
    y: Number
    width: Number
    height: Number
    visible: bool = True
    locked: bool = False

    rotation: Optional[Number] = None

    # Auto layout
    layout_mode: Optional[str] = None
    layout_align: Optional[str] = None
    layout_grow: Optional[Number] = None
    primary_axis_sizing_mode: Optional[str] = None
    counter_axis_sizing_mode: Optional[str] = None
    primary_axis_align_items: Optional[str] = None
    counter_axis_align_items: Optional[str] = None
    padding_left: Optional[Any] = None
    padding_right: Optional[Any] = None
    padding_top: Optional[Any] = None
    padding_bottom: Optional[Any] = None
    item_spacing: Optional[Any] = None

    constraints: Optional[Constraints] = None
    constrain_proportions: Optional[Any] = None

    # Geometry styles
    fills: Optional[List[Paint]] = None
    strokes: Optional[List[Paint]] = None
    stroke_weight: Optional[Any] = None
    stroke_align: Optional[str] = None
    dash_pattern: Optional[List[Number]] = None
    effects: Optional[List[Effect]] = None

    # Text
    font_name: Optional[FontName] = None
    font_size: Optional[Any] = None
    letter_spacing: Optional[Any] = None
    line_height: Optional[Any] = None
    text_align_horizontal: Optional[str] = None
    text_case: Optional[str] = None
    text_decoration: Optional[str] = None

    # Components
    component_properties: Optional[Dict[str, Any]] = None
    variant_properties: Optional[Dict[str, Any]] = None

    children: Optional[List["SceneNode"]] = None


class ParentNode(_NodeBase):
    """
    A container seen from one of its children.

    Pages and the document contain nodes but have no geometry of their own,
    so only identity is required here.
    """

    id: str
    name: Optional[str] = None
    type: str
    x: Optional[Number] = None
    y: Optional[Number] = None
    width: Optional[Number] = None
    height: Optional[Number] = None
    children: Optional[List[SceneNode]] = None


def _link_children(node: _NodeBase) -> None:
    for child in node.children or []:
        child._parent = node
        _link_children(child)


def _attach_parent(node: _NodeBase, data: Dict[str, Any]) -> None:
    parent_data = data.get("parent")
    if not isinstance(parent_data, dict):
        return
    parent = ParentNode.model_validate(parent_data)
    if parent.children is not None:
        parent.children = [node if sibling.id == node.id else sibling for sibling in parent.children]
    _link_children(parent)
    _attach_parent(parent, parent_data)
    node._parent = parent


def parse_node(data: Dict[str, Any]) -> SceneNode:
    """
    Build a node from a plugin payload and wire its parent links.

    `data["parent"]`, when present, is a container payload whose `children`
    list holds the node's siblings (including a summary of the node itself).
    The summary is swapped for the fully parsed node so the sibling order is
    preserved and `node.parent.children` contains `node`. The container may
    itself carry a `parent`, up to the page.
    """
    node = SceneNode.model_validate(data)
    _link_children(node)
    _attach_parent(node, data)
    return node


def parse_selection(payload: List[Dict[str, Any]]) -> List[SceneNode]:
    """Parse the ordered selection payload. Order is preserved."""
    nodes = [parse_node(item) for item in payload]
    logger.debug(f"🧩 Parsed {len(nodes)} selected node(s)")
    return nodes
