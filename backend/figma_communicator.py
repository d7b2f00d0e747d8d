"""
Figma Communicator - Host Services over RPC

This module provides the host services the export pipeline needs from the
Figma plugin (rendering a node to an image, base64 encoding). Requests go
out as tool_call messages over the bridge WebSocket and are resolved when
the matching tool_response arrives.
"""

import asyncio
import base64
import binascii
import json
import uuid
import logging
import time
from typing import Dict, Any, Optional, Protocol

logger = logging.getLogger(__name__)

COMMAND_EXPORT_NODE_IMAGE = "export_node_image"


class HostServices(Protocol):
    """What the export pipeline needs from the host."""

    async def export_image(self, node_id: str, settings: Dict[str, Any]) -> bytes:
        ...

    def base64_encode(self, data: bytes) -> str:
        ...


class HostRequestError(Exception):
    """
    A host request that failed on the plugin side.

    Carries a structured payload: { code: str, message: str, details?: dict }
    """

    def __init__(self, payload: Any, command: str | None = None, params: Dict[str, Any] | None = None):
        self.command = command
        self.params = params

        if isinstance(payload, dict):
            self.code: str = str(payload.get("code", "unknown_plugin_error"))
            self.message: str = str(payload.get("message", ""))
            self.details: Dict[str, Any] = payload.get("details", {}) or {}
            normalized_payload = payload
        else:
            self.code = "unknown_plugin_error"
            self.message = str(payload)
            self.details = {}
            normalized_payload = {"code": self.code, "message": self.message, "details": self.details}

        self.payload = normalized_payload

        text = self.message if self.message else self.code
        super().__init__(text)


class FigmaCommunicator:
    """
    Handles RPC communication with the Figma plugin.

    This class manages:
    - Sending tool_call messages to the plugin
    - Tracking pending requests with unique IDs
    - Resolving futures when tool_response messages arrive
    - Timeouts and structured errors
    """

    def __init__(self, websocket, timeout: float = 30.0):
        """
        Initialize the communicator.

        Args:
            websocket: The WebSocket connection to send messages through
            timeout: Timeout in seconds for each request (default: 30.0)
        """
        self.websocket = websocket
        self.timeout = timeout
        self.pending_requests: Dict[str, asyncio.Future] = {}
        self.request_timestamps: Dict[str, float] = {}
        self.request_meta: Dict[str, Dict[str, Any]] = {}

    def generate_id(self) -> str:
        """Generate a unique ID for requests."""
        return str(uuid.uuid4())

    async def send_command(self, command: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a command to the Figma plugin and wait for the response.

        Args:
            command: The command name (e.g., "export_node_image")
            params: Optional parameters for the command

        Returns:
            The result from the plugin

        Raises:
            asyncio.TimeoutError: If the request times out
            HostRequestError: If the plugin returns an error
        """
        if not self.websocket:
            raise RuntimeError("WebSocket connection not available")

        request_id = self.generate_id()
        message = {
            "type": "tool_call",
            "id": request_id,
            "command": command,
            "params": params or {}
        }

        future = asyncio.get_running_loop().create_future()
        self.pending_requests[request_id] = future
        self.request_timestamps[request_id] = time.time()
        self.request_meta[request_id] = {"command": command, "params": params or {}}
        logger.debug(f"📝 Added to pending requests: {request_id} (total: {len(self.pending_requests)})")

        try:
            logger.info(f"🚀 Sending tool_call: {command} with ID: {request_id}")
            await self.websocket.send(json.dumps(message))
            return await asyncio.wait_for(future, timeout=self.timeout)

        except asyncio.TimeoutError:
            self.pending_requests.pop(request_id, None)
            start_time = self.request_timestamps.pop(request_id, None)
            self.request_meta.pop(request_id, None)
            elapsed = time.time() - start_time if start_time else self.timeout
            logger.error(f"⏰ Tool call {command} (ID: {request_id}) timed out after {elapsed:.3f}s (limit: {self.timeout}s)")
            raise asyncio.TimeoutError(f"Tool call '{command}' timed out after {elapsed:.1f} seconds")

        except Exception as e:
            self.pending_requests.pop(request_id, None)
            self.request_timestamps.pop(request_id, None)
            self.request_meta.pop(request_id, None)
            logger.error(f"Tool call {command} (ID: {request_id}) failed: {e}")
            raise

    async def export_image(self, node_id: str, settings: Dict[str, Any]) -> bytes:
        """Ask the plugin to render a node; the plugin replies with base64 image bytes."""
        params = {"node_id": node_id, "export_settings": settings}
        result = await self.send_command(COMMAND_EXPORT_NODE_IMAGE, params)

        encoded = result.get("bytes") if isinstance(result, dict) else None
        if not isinstance(encoded, str):
            raise HostRequestError(
                {"code": "invalid_export_result", "message": f"No image bytes returned for node {node_id}", "details": {"result": result}},
                command=COMMAND_EXPORT_NODE_IMAGE,
                params=params,
            )
        try:
            return base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as e:
            raise HostRequestError(
                {"code": "invalid_export_result", "message": f"Image bytes for node {node_id} are not valid base64: {e}"},
                command=COMMAND_EXPORT_NODE_IMAGE,
                params=params,
            ) from e

    def base64_encode(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    def handle_tool_response(self, message: Dict[str, Any]) -> None:
        """
        Handle incoming tool_response messages from the plugin.

        Args:
            message: The tool_response message from the plugin
        """
        request_id = message.get("id")
        if not request_id:
            logger.warning("❌ Received tool_response without ID")
            return

        future = self.pending_requests.pop(request_id, None)
        start_time = self.request_timestamps.pop(request_id, None)
        meta = self.request_meta.pop(request_id, None)
        cmd = meta.get("command") if isinstance(meta, dict) else None
        params = meta.get("params") if isinstance(meta, dict) else None

        if not future:
            logger.warning(f"❌ Received tool_response for unknown ID: {request_id}")
            return

        if future.done():
            logger.debug(f"⚠️ Future already completed for {request_id}")
            return

        elapsed = time.time() - start_time if start_time else 0

        if isinstance(message.get("error_structured"), dict):
            error_payload = message["error_structured"]
            logger.error(f"❌ Tool call {request_id} failed after {elapsed:.3f}s: code={error_payload.get('code')}, message={error_payload.get('message')}")
            future.set_exception(HostRequestError(error_payload, command=cmd, params=params))
            return

        if "error" in message:
            error_val = message.get("error")
            logger.error(f"❌ Tool call {request_id} failed after {elapsed:.3f}s: {error_val}")
            error_payload = error_val if isinstance(error_val, dict) else _parse_error_payload(error_val)
            future.set_exception(HostRequestError(error_payload, command=cmd, params=params))
            return

        result = message.get("result", {})
        if isinstance(result, dict) and result.get("success") is False:
            err_text = result.get("message") or "Tool reported failure"
            logger.error(f"❌ Tool call {request_id} reported failure after {elapsed:.3f}s: {err_text}")
            future.set_exception(HostRequestError(
                {"code": "plugin_reported_failure", "message": str(err_text), "details": {"result": result}},
                command=cmd,
                params=params,
            ))
            return

        logger.info(f"✅ Tool call {request_id} completed successfully after {elapsed:.3f}s")
        future.set_result(result)

    def cleanup_pending_requests(self) -> None:
        """Cancel all pending requests (called on shutdown)."""
        for request_id, future in self.pending_requests.items():
            if not future.done():
                future.cancel()
                logger.info(f"Cancelled pending request: {request_id}")
        self.pending_requests.clear()
        self.request_timestamps.clear()
        self.request_meta.clear()


def _parse_error_payload(error_val: Any) -> Dict[str, Any]:
    """Plugins send `error` either as an object or as a JSON/plain string."""
    try:
        parsed = json.loads(error_val)
    except (TypeError, ValueError):
        parsed = None
    if isinstance(parsed, dict):
        return parsed
    return {"code": "unknown_plugin_error", "message": str(error_val)}
