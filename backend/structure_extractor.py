from figma_nodes import SceneNode
from design_types import Constraints, StructureData

# Copied verbatim when present on an auto layout node.
_AUTO_LAYOUT_ATTRIBUTES = (
    "layout_align",
    "primary_axis_sizing_mode",
    "counter_axis_sizing_mode",
    "primary_axis_align_items",
    "counter_axis_align_items",
)

# Copied only when numeric.
_AUTO_LAYOUT_NUMBERS = (
    "layout_grow",
    "padding_left",
    "padding_right",
    "padding_top",
    "padding_bottom",
    "item_spacing",
)


def extract_structure(node: SceneNode) -> StructureData:
    """Auto layout settings, constraints and proportional resizing of a node."""
    structure = StructureData()

    if node.has("layout_mode"):
        structure.layout_mode = node.layout_mode
        structure.is_auto_layout = True

        for attr in _AUTO_LAYOUT_ATTRIBUTES:
            if node.has(attr):
                setattr(structure, attr, getattr(node, attr))

        for attr in _AUTO_LAYOUT_NUMBERS:
            if node.has_number(attr):
                setattr(structure, attr, getattr(node, attr))
    else:
        structure.is_auto_layout = False

    if node.has("constraints"):
        structure.constraints = Constraints(
            horizontal=node.constraints.horizontal,
            vertical=node.constraints.vertical,
        )

    if isinstance(node.constrain_proportions, bool):
        structure.responsive_resize = node.constrain_proportions

    return structure
