from figma_nodes import SceneNode
from design_types import HierarchyData


def extract_hierarchy(node: SceneNode) -> HierarchyData:
    """
    Parent id, child ids and component/variant property maps of a node.

    Variant values that are not strings are dropped.
    """
    hierarchy = HierarchyData()

    if node.parent is not None:
        hierarchy.parent = node.parent.id

    if node.has("children"):
        hierarchy.children = [child.id for child in node.children]

    if node.has("component_properties"):
        hierarchy.component_properties = dict(node.component_properties)

    if node.has("variant_properties"):
        hierarchy.variant_properties = {
            key: value for key, value in node.variant_properties.items() if isinstance(value, str)
        }

    return hierarchy
