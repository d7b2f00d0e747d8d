"""
Export Service - Request handling

Turns one export request (selection payload + option overrides) into exactly
one outbound message: the serialized design data, the empty-selection
message, or a generic failure message.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from figma_nodes import parse_selection
from figma_communicator import HostServices
from design_types import merge_options
from design_data_extractor import extract_design_data
from serializers import serialize

logger = logging.getLogger(__name__)

MESSAGE_TYPE_EXPORT = "export"
MESSAGE_TYPE_EXPORT_COMPLETE = "exportComplete"
MESSAGE_TYPE_ERROR = "error"

EMPTY_SELECTION_MESSAGE = "Please select at least one layer to export."
EXPORT_ERROR_PREFIX = "An error occurred during export: "


def export_complete(data: str) -> Dict[str, Any]:
    return {"type": MESSAGE_TYPE_EXPORT_COMPLETE, "data": data}


def export_error(message: str) -> Dict[str, Any]:
    return {"type": MESSAGE_TYPE_ERROR, "message": message}


async def run_export(
    selection: Optional[List[Dict[str, Any]]],
    overrides: Optional[Mapping[str, Any]] = None,
    host: Optional[HostServices] = None,
) -> Dict[str, Any]:
    """
    Run one export and build the reply message.

    The pipeline is never entered for an empty selection. Any failure while
    parsing nodes, extracting or serializing aborts the whole export; no
    partial result is returned.

    Args:
        selection: Ordered node payloads as sent by the plugin
        overrides: Partial export options; merged over the defaults
        host: Host services used to render screenshots

    Returns:
        An `exportComplete` or `error` message
    """
    if not selection:
        logger.info("🙅 Export requested with an empty selection")
        return export_error(EMPTY_SELECTION_MESSAGE)

    try:
        options = merge_options(overrides)
        nodes = parse_selection(selection)
        logger.info(f"📤 Exporting {len(nodes)} node(s) as '{options.output_format}'")
        design_data = await extract_design_data(nodes, options, host)
        output = serialize(design_data, options.output_format)
    except Exception as e:
        logger.error(f"❌ Export error: {e}", exc_info=True)
        return export_error(EXPORT_ERROR_PREFIX + str(e))

    logger.info(f"✅ Export complete ({len(output)} chars)")
    return export_complete(output)
