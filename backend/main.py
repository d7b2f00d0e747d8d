import json
import os
import sys
import signal
import logging
import asyncio
from typing import Dict, Any, Optional
import websockets
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from figma_communicator import FigmaCommunicator
from export_service import MESSAGE_TYPE_EXPORT, export_error, run_export

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='[%(asctime)s] [export] [%(levelname)s] %(message)s',
    datefmt='%Y-%m-%dT%H:%M:%S'
)
logger = logging.getLogger(__name__)

# Message type constants to avoid stringly-typed conditionals
MESSAGE_TYPE_JOIN = "join"
MESSAGE_TYPE_PING = "ping"
MESSAGE_TYPE_PONG = "pong"
MESSAGE_TYPE_SYSTEM = "system"
MESSAGE_TYPE_TOOL_RESPONSE = "tool_response"
MESSAGE_TYPE_ERROR = "error"

EXPORT_IN_PROGRESS_MESSAGE = "An export is already in progress."


class ExportAgent:
    """Bridge client that answers export requests from the Figma plugin."""

    def __init__(self, bridge_url: str, channel: str, tool_timeout: float = 30.0):
        self.bridge_url = bridge_url
        self.channel = channel
        self.tool_timeout = tool_timeout
        self.websocket = None
        self.running = True
        self.reconnect_delay = 1  # Start with 1 second
        self.max_reconnect_delay = 30  # Max 30 seconds
        self._keep_alive_task: Optional[asyncio.Task] = None
        self._export_task: Optional[asyncio.Task] = None
        self.communicator: Optional[FigmaCommunicator] = None

    async def _send_json(self, payload: Dict[str, Any]) -> None:
        """Send a JSON-serializable payload over the websocket if connected."""
        if not self.websocket:
            raise RuntimeError("WebSocket not connected")
        await self.websocket.send(json.dumps(payload, ensure_ascii=False))

    async def connect(self) -> bool:
        """Connect to the bridge and join as agent"""
        await self._close_connection()
        try:
            logger.info(f"Connecting to bridge at {self.bridge_url}")
            # Screenshots travel as base64 data URIs; lift the frame size limit
            self.websocket = await websockets.connect(self.bridge_url, max_size=None)

            await self._send_json({
                "type": MESSAGE_TYPE_JOIN,
                "role": "agent",
                "channel": self.channel
            })
            logger.info(f"Sent join message for channel: {self.channel}")

            await self._send_json({"type": MESSAGE_TYPE_PING})
            logger.info("🏓 Sent ping message")

            self._keep_alive_task = asyncio.create_task(self._websocket_keep_alive())

            self.communicator = FigmaCommunicator(self.websocket, timeout=self.tool_timeout)
            logger.info(f"Initialized FigmaCommunicator (timeout: {self.tool_timeout}s)")

            self.reconnect_delay = 1
            return True

        except Exception as e:
            logger.error(f"Failed to connect: {e}")
            return False

    async def handle_message(self, message: Dict[str, Any]) -> None:
        """Dispatch an incoming bridge message by type."""
        msg_type = message.get("type")
        logger.debug(f"🔍 Message received - Type: '{msg_type}', Keys: {list(message.keys())}")

        handlers = {
            MESSAGE_TYPE_EXPORT: self._handle_export,
            MESSAGE_TYPE_TOOL_RESPONSE: self._handle_tool_response,
            MESSAGE_TYPE_SYSTEM: self._handle_system,
            MESSAGE_TYPE_PONG: self._handle_pong,
            MESSAGE_TYPE_ERROR: self._handle_bridge_error,
        }

        handler = handlers.get(msg_type, self._handle_unknown)
        await handler(message)

    async def _handle_export(self, message: Dict[str, Any]) -> None:
        if self._export_task and not self._export_task.done():
            logger.warning("⚠️ Export requested while another export is running")
            await self._send_json(export_error(EXPORT_IN_PROGRESS_MESSAGE))
            return

        # Runs in the background so tool_response messages for screenshots
        # keep flowing through the listen loop.
        self._export_task = asyncio.create_task(self._run_export(message))

    async def _run_export(self, message: Dict[str, Any]) -> None:
        try:
            reply = await run_export(message.get("selection"), message.get("options"), self.communicator)
            await self._send_json(reply)
        except asyncio.CancelledError:
            logger.info("🛑 Export task cancelled")
            raise
        except Exception as e:
            logger.error(f"❌ Failed to deliver export result: {e}")

    async def _handle_tool_response(self, message: Dict[str, Any]) -> None:
        logger.debug(f"📨 Received tool_response: {message.get('id', 'no-id')}")
        if self.communicator:
            self.communicator.handle_tool_response(message)
        else:
            logger.warning("Received tool_response but communicator not initialized")

    async def _handle_system(self, message: Dict[str, Any]) -> None:
        sys_msg = message.get('message')
        logger.info(f"🔧 System message: {sys_msg}")
        if isinstance(sys_msg, str) and 'disconnected' in sys_msg.lower() and 'plugin' in sys_msg.lower():
            await self.cancel_active_export(reason="plugin_disconnected")

    async def _handle_pong(self, _: Dict[str, Any]) -> None:
        logger.info("🏓 Received pong response")

    async def _handle_bridge_error(self, message: Dict[str, Any]) -> None:
        error_msg = message.get("message", "Unknown error")
        logger.error(f"Bridge error: {error_msg}")

    async def _handle_unknown(self, message: Dict[str, Any]) -> None:
        logger.debug(f"Ignoring unknown message type: {message.get('type')}")

    async def cancel_active_export(self, reason: str = "") -> None:
        """Cancel the in-flight export and any pending host requests."""
        if self._export_task and not self._export_task.done():
            logger.info(f"🧹 Cancelling active export ({reason})")
            self._export_task.cancel()
            await asyncio.sleep(0)
        if self.communicator:
            self.communicator.cleanup_pending_requests()

    async def listen(self) -> None:
        """Listen for messages from the bridge"""
        logger.info("🎧 Starting to listen for messages from bridge")
        while self.running and self.websocket:
            try:
                raw_message = await self.websocket.recv()
            except asyncio.CancelledError:
                logger.info("🛑 Listen loop cancelled")
                break
            except Exception as e:
                logger.error(f"❌ Error receiving message: {e}")
                break

            if not raw_message:
                logger.warning("📡 Received empty WebSocket message")
                continue

            try:
                message = json.loads(raw_message)
                await self.handle_message(message)
            except json.JSONDecodeError as e:
                logger.error(f"❌ Failed to decode message: {e}, Raw: {raw_message[:200]}")
            except Exception as e:
                logger.error(f"❌ Error handling message: {e}")

    async def _close_connection(self) -> None:
        """Stop the keep-alive task and close the current websocket, if any."""
        task, self._keep_alive_task = self._keep_alive_task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

        websocket, self.websocket = self.websocket, None
        if websocket is not None:
            try:
                await websocket.close()
            except Exception as e:
                logger.warning(f"⚠️ Error closing websocket: {e}")

    async def _websocket_keep_alive(self, interval: int = 30) -> None:
        """Keep WebSocket connection alive with periodic pings"""
        # Bound to the socket it was started for; a reconnect starts a new task
        websocket = self.websocket
        try:
            while self.running and self.websocket is websocket and websocket is not None:
                await asyncio.sleep(interval)
                if self.websocket is not websocket:
                    break
                try:
                    pong_waiter = await websocket.ping()
                    await asyncio.wait_for(pong_waiter, timeout=10)
                    logger.debug("💓 WebSocket keep-alive ping successful")
                except asyncio.TimeoutError:
                    logger.warning("💔 WebSocket keep-alive ping timed out")
                    break
                except websockets.ConnectionClosed as e:
                    logger.error(f"💔 WebSocket keep-alive ping failed: {e}")
                    break
        except asyncio.CancelledError:
            logger.debug("💓 WebSocket keep-alive task cancelled")

    async def run_with_reconnect(self) -> None:
        """Main loop with reconnection logic"""
        while self.running:
            try:
                if await self.connect():
                    logger.info("🌉 Connected to bridge successfully")
                    await self.listen()
                else:
                    logger.warning("Failed to connect to bridge")
            except Exception as e:
                logger.error(f"Unexpected error: {e}")
            finally:
                await self.cancel_active_export(reason="connection_lost")
                await self._close_connection()

            if self.running:
                logger.info(f"Reconnecting in {self.reconnect_delay} seconds...")
                await asyncio.sleep(self.reconnect_delay)
                self.reconnect_delay = min(self.reconnect_delay * 2, self.max_reconnect_delay)

    def shutdown(self) -> None:
        """Graceful shutdown"""
        logger.info("Shutting down export agent")
        self.running = False

        if self._keep_alive_task and not self._keep_alive_task.done():
            self._keep_alive_task.cancel()

        if self._export_task and not self._export_task.done():
            self._export_task.cancel()

        if self.communicator:
            self.communicator.cleanup_pending_requests()
            logger.info("Cleaned up pending host requests")

        self.websocket = None


def get_config():
    """Get configuration from environment variables or CLI args"""
    bridge_url = os.getenv("BRIDGE_URL", "ws://localhost:3055")
    channel = os.getenv("FIGMA_CHANNEL")
    tool_timeout = float(os.getenv("FIGMA_TOOL_TIMEOUT", "30.0"))

    for arg in sys.argv[1:]:
        if arg.startswith("--channel="):
            channel = arg.split("=", 1)[1]
        elif arg.startswith("--bridge-url="):
            bridge_url = arg.split("=", 1)[1]

    if not channel:
        channel = "figma-export-default"
        logger.info(f"No channel specified, using default: {channel}")

    return bridge_url, channel, tool_timeout


def main():
    bridge_url, channel, tool_timeout = get_config()

    logger.info("Starting Figma design export agent")
    logger.info(f"Bridge URL: {bridge_url}")
    logger.info(f"Channel: {channel}")

    agent = ExportAgent(bridge_url, channel, tool_timeout=tool_timeout)

    def signal_handler(signum, frame):
        logger.info("Received shutdown signal")
        agent.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    try:
        asyncio.run(agent.run_with_reconnect())
    except KeyboardInterrupt:
        logger.info("Export agent interrupted")
    finally:
        agent.shutdown()


if __name__ == "__main__":
    main()
