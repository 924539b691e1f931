import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from websockets.asyncio.client import connect as websocket_connect
from websockets.exceptions import WebSocketException

from agentarium_client.config import Settings
from agentarium_client.errors import MessageDecodeError, UnknownMessageType
from agentarium_client.schemas.messages import MessageType, decode_message

logger = logging.getLogger(__name__)

Connector = Callable[[str], Awaitable[Any]]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


class WebSocketClient:
    """
    Receives pushed messages from the API and dispatches them to callbacks.

    All callbacks run on the event loop that called connect(), so they can
    mutate the scene without locking. A dropped connection is retried with a
    fixed delay until max_reconnect_attempts consecutive failures, after which
    the client stays in the failed state.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        max_reconnect_attempts: int = 5,
        reconnect_delay: float = 2.0,
        connector: Connector = websocket_connect,
    ):
        self.url = url or Settings().ws_url
        self.max_reconnect_attempts = max_reconnect_attempts
        self.reconnect_delay = reconnect_delay
        self._connector = connector

        self.state = ConnectionState.DISCONNECTED
        self.last_error: Optional[str] = None
        self.reconnect_attempts = 0

        self._websocket: Any = None
        self._task: Optional[asyncio.Task] = None
        self._closing = False

        self.on_state_change: Optional[Callable[[ConnectionState], None]] = None
        self.on_filesystem_update: Optional[Callable] = None
        self.on_agent_event: Optional[Callable] = None
        self.on_agent_spawn: Optional[Callable] = None
        self.on_agent_despawn: Optional[Callable] = None
        self.on_terrain_loading: Optional[Callable] = None
        self.on_terrain_complete: Optional[Callable] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "WebSocketClient":
        return cls(
            url=settings.ws_url,
            max_reconnect_attempts=settings.max_reconnect_attempts,
            reconnect_delay=settings.reconnect_delay,
            **kwargs,
        )

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def connect(self):
        """Start the connection task on the running event loop"""
        if self.is_running:
            logger.info("WebSocket already connected or connecting")
            return

        self._closing = False
        self.reconnect_attempts = 0
        self.last_error = None
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def disconnect(self):
        """Close the socket without reconnecting"""
        logger.info("Disconnecting WebSocket")
        self._closing = True

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except (WebSocketException, OSError) as e:
                logger.debug(f"Error while closing WebSocket: {e}")
            self._websocket = None

        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

        self._set_state(ConnectionState.DISCONNECTED)

    async def wait_closed(self):
        """Wait until the connection task finishes"""
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self):
        failures = 0

        while not self._closing:
            self._set_state(
                ConnectionState.RECONNECTING if failures else ConnectionState.CONNECTING
            )
            logger.info(f"Connecting to WebSocket: {self.url}")

            try:
                self._websocket = await self._connector(self.url)
                failures = 0
                self.reconnect_attempts = 0
                self.last_error = None
                self._set_state(ConnectionState.CONNECTED)

                async for raw in self._websocket:
                    self.handle_frame(raw)

                error = "Connection closed by server"
            except (WebSocketException, OSError, asyncio.TimeoutError) as e:
                error = str(e) or e.__class__.__name__

            self._websocket = None
            if self._closing:
                break

            logger.warning(f"WebSocket error: {error}")
            self.last_error = error
            failures += 1

            if failures >= self.max_reconnect_attempts:
                logger.error("Max reconnect attempts reached")
                self.last_error = f"Connection failed after {self.max_reconnect_attempts} attempts"
                self._set_state(ConnectionState.FAILED)
                return

            self.reconnect_attempts = failures
            self._set_state(ConnectionState.RECONNECTING)
            logger.info(
                f"Reconnecting in {self.reconnect_delay}s "
                f"(attempt {failures}/{self.max_reconnect_attempts})"
            )
            await asyncio.sleep(self.reconnect_delay)

    def handle_frame(self, raw: Union[str, bytes]):
        """Decode one frame and invoke the matching callback"""
        try:
            message = decode_message(raw)
        except UnknownMessageType as e:
            logger.warning(f"Unknown message type: {e.message_type}")
            return
        except MessageDecodeError as e:
            logger.warning(f"Failed to parse message: {e}")
            return

        handler = self._handler_for(message.type)
        logger.debug(f"Received {message.type.value} message")
        if handler is None:
            return

        try:
            handler(message.payload)
        except Exception:
            logger.exception(f"Handler for {message.type.value} failed")

    def _handler_for(self, message_type: MessageType) -> Optional[Callable]:
        return {
            MessageType.FILESYSTEM: self.on_filesystem_update,
            MessageType.AGENT_EVENT: self.on_agent_event,
            MessageType.AGENT_SPAWN: self.on_agent_spawn,
            MessageType.AGENT_DESPAWN: self.on_agent_despawn,
            MessageType.TERRAIN_LOADING: self.on_terrain_loading,
            MessageType.TERRAIN_COMPLETE: self.on_terrain_complete,
        }[message_type]

    def _set_state(self, state: ConnectionState):
        if state == self.state:
            return
        self.state = state
        if self.on_state_change is None:
            return

        try:
            self.on_state_change(state)
        except Exception:
            logger.exception(f"State observer failed on {state.value}")
