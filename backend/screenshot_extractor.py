import logging
from typing import Any, Dict

from figma_nodes import SceneNode
from figma_communicator import HostServices

logger = logging.getLogger(__name__)

SCREENSHOT_EXPORT_SETTINGS: Dict[str, Any] = {
    "format": "PNG",
    "constraint": {"type": "SCALE", "value": 2},
}


async def extract_screenshot(node: SceneNode, host: HostServices) -> str:
    """
    Render the node at 2x as PNG and return it as a data URI.

    Rendering failures never abort an export: they are logged and an empty
    string is returned instead.
    """
    try:
        image_bytes = await host.export_image(node.id, SCREENSHOT_EXPORT_SETTINGS)
        encoded = host.base64_encode(image_bytes)
        return f"data:image/png;base64,{encoded}"
    except Exception as e:
        logger.error(f"❌ Error extracting screenshot for {node.id}: {e}")
        return ""
