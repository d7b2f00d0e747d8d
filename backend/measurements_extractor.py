"""
Measurements Extractor

Geometry of a node: position, size, rotation, auto-layout padding, and a
margin inferred from the parent and the previous sibling.
"""

import logging
from typing import Optional

from figma_nodes import SceneNode
from design_types import MeasurementsData, Spacing

logger = logging.getLogger(__name__)

_PADDING_SIDES = (
    ("top", "padding_top"),
    ("right", "padding_right"),
    ("bottom", "padding_bottom"),
    ("left", "padding_left"),
)


def _extract_padding(node: SceneNode) -> Optional[Spacing]:
    sides = {side: getattr(node, attr) for side, attr in _PADDING_SIDES if node.has_number(attr)}
    if not sides:
        return None
    return Spacing(**sides)


def infer_margin(node: SceneNode) -> Optional[Spacing]:
    """
    Approximate the node's margin from its surroundings.

    Assumes children are stacked vertically in sibling order: the top margin
    is the gap to the previous sibling's bottom edge, or to the parent's top
    edge for the first child. Layout direction, wrapping and absolute
    positioning are not taken into account. Returns None without a parent
    that has children.

    Sides measured against a parent without geometry (a page) are left out;
    if no side can be measured there is no margin.
    """
    parent = node.parent
    if parent is None or not parent.has("children"):
        return None

    margin = Spacing()
    index = node.index_in_parent()
    if index > 0:
        previous = parent.children[index - 1]
        margin.top = node.y - (previous.y + previous.height)
    elif parent.has_number("y"):
        margin.top = node.y - parent.y

    if parent.has_number("x"):
        margin.left = node.x - parent.x

    return None if margin.is_empty() else margin


def extract_measurements(node: SceneNode) -> MeasurementsData:
    measurements = MeasurementsData(x=node.x, y=node.y, width=node.width, height=node.height)

    if node.has("rotation"):
        measurements.rotation = node.rotation

    measurements.padding = _extract_padding(node)
    measurements.margin = infer_margin(node)

    logger.debug(f"📏 Measured {node.id}: {measurements.to_dict()}")
    return measurements
