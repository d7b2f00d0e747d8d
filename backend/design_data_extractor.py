"""
Design Data Extractor

Runs the enabled extractors over every selected node and collects the
results into one DesignData record.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from figma_nodes import SceneNode
from figma_communicator import HostServices
from design_types import DesignData, ExportOptions, NodeData
from hierarchy_extractor import extract_hierarchy
from measurements_extractor import extract_measurements
from screenshot_extractor import extract_screenshot
from structure_extractor import extract_structure
from styles_extractor import extract_styles

logger = logging.getLogger(__name__)


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with milliseconds and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def extract_design_data(
    selection: Sequence[SceneNode],
    options: ExportOptions,
    host: Optional[HostServices] = None,
) -> DesignData:
    """
    Extract design data for the selected nodes.

    Nodes are processed one at a time in selection order, so the output
    order always matches the input. Only screenshot failures are absorbed;
    any other extractor error propagates and nothing is returned.

    Args:
        selection: The selected nodes, in order
        options: Which extractors to run
        host: Host services; required when screenshots are enabled

    Returns:
        The extracted design data
    """
    if options.include_screenshot and host is None:
        raise ValueError("Host services are required to extract screenshots")

    design_data = DesignData(timestamp=iso_timestamp(), nodes=[])

    for node in selection:
        node_data = NodeData(id=node.id, name=node.name, type=node.type)

        if options.include_screenshot:
            node_data.screenshot = await extract_screenshot(node, host)

        if options.include_hierarchy:
            hierarchy = extract_hierarchy(node)
            if not hierarchy.is_empty():
                node_data.hierarchy = hierarchy

        if options.include_measurements:
            node_data.measurements = extract_measurements(node)

        if options.include_styles:
            styles = extract_styles(node)
            if not styles.is_empty():
                node_data.styles = styles

        if options.include_structure:
            node_data.structure = extract_structure(node)

        design_data.nodes.append(node_data)

    logger.info(f"📦 Extracted design data for {len(design_data.nodes)} node(s)")
    return design_data
